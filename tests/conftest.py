import threading
import time

import pytest
import requests
from werkzeug.serving import make_server

from methodrpc import ErrorPolicy, bind_routes, build_service, create_app
from methodrpc.client import ServiceClient
from methodrpc.jobs import create_app as create_jobs_app, JobStore

from sample_services import ItemsAPI, ListingAPI


def _wait_until_ready(url: str, thread: threading.Thread, timeout_s: float = 10.0) -> None:
    deadline = time.time() + timeout_s
    last_err = None

    while time.time() < deadline:
        if not thread.is_alive():
            raise RuntimeError("Server thread exited early while starting.")

        try:
            r = requests.get(url + "/health", timeout=0.5)
            if r.status_code == 200 and r.text.strip() == "OK":
                return
        except Exception as e:
            last_err = e

        time.sleep(0.05)

    raise TimeoutError(f"Server not ready at {url}. Last error: {last_err!r}")


@pytest.fixture
def items_api():
    return ItemsAPI()


@pytest.fixture
def app(items_api):
    """
    App with ListingAPI at /x and ItemsAPI at /items, error policy installed.
    """
    listing = build_service(ListingAPI())
    listing.get("", "List")

    items = build_service(items_api)
    items.post("/", "Create")
    items.post("/store", "Store")
    items.put("/touch", "Touch")
    items.post("/refuse", "Refuse")
    items.post("/counts", "Counts")
    items.post("/mix", "Mix")

    app = create_app([(listing, "/x"), (items, "/items")])
    app.testing = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def bare_app(items_api):
    """
    App without any error policy: errors reach Flask untouched.
    """
    from flask import Flask

    app = Flask(__name__)
    app.testing = True
    bind_routes(build_service(items_api), "/items", app)
    return app


@pytest.fixture(scope="session")
def jobs_store():
    return JobStore()


@pytest.fixture(scope="session")
def server_url(jobs_store):
    app = create_jobs_app(store=jobs_store)
    server = make_server("127.0.0.1", 0, app, threaded=True)
    url = f"http://127.0.0.1:{server.server_port}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    try:
        _wait_until_ready(url, thread)
        yield url
    finally:
        server.shutdown()
        thread.join(timeout=2)


@pytest.fixture(scope="session")
def service_client(server_url):
    return ServiceClient(server_url)


@pytest.fixture
def policy():
    return ErrorPolicy()
