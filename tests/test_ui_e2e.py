import json
import os
import threading

import pytest
from jsonschema import validate
from playwright.sync_api import expect
from werkzeug.serving import make_server

from app import create_app
from tracker.config import PROJECT_ROOT, Settings

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_E2E") != "1",
    reason="browser tests need RUN_E2E=1, installed Playwright browsers and CDN access",
)

NAME_SCHEMA = {
    "type": "object",
    "properties": {"name": {"type": "string", "minLength": 1}},
    "required": ["name"],
}

TASK_REQUEST_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "start": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}$"},
        "end": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}$"},
    },
    "required": ["name", "start", "end"],
}


@pytest.fixture(scope="module")
def live_server_url(tmp_path_factory):
    workdir = tmp_path_factory.mktemp("e2e")
    settings = Settings(
        host="127.0.0.1",
        port=0,
        debug=False,
        data_file=workdir / "data.json",
        static_dir=PROJECT_ROOT / "frontend",
        log_level="WARNING",
        log_file=None,
    )
    server = make_server("127.0.0.1", 0, create_app(settings), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}"
    server.shutdown()
    thread.join()


# ========== HELPERS (sync) ==========
def submit_and_capture(page, path_suffix, submit):
    def is_post(r):
        return r.request.method == "POST" and r.url.endswith(path_suffix)

    with page.expect_response(is_post, timeout=6000) as resp_info:
        submit()
    resp = resp_info.value
    req = resp.request
    try:
        payload = req.post_data_json
    except Exception:
        payload = json.loads(req.post_data or "{}")
    return resp, payload


def add_programme(page, name):
    page.locator("#programme-name").fill(name)
    return submit_and_capture(page, "/api/programmes", lambda: page.locator("#btn-add-programme").click())


def add_module(page, name):
    page.locator("#module-name").fill(name)
    return submit_and_capture(page, "/modules", lambda: page.locator("#btn-add-module").click())


def add_task(page, module_id, name, start, end):
    block = page.locator(f'.module[data-module-id="{module_id}"]')
    block.locator(".task-name").fill(name)
    block.locator(".task-start").fill(start)
    block.locator(".task-end").fill(end)
    return submit_and_capture(page, "/tasks", lambda: block.locator(".btn-add-task").click())


# ========== TEST ==========
def test_create_programme_module_task_and_chart(page, live_server_url):
    page.goto(live_server_url, wait_until="domcontentloaded")

    resp, payload = add_programme(page, "Launch")
    assert resp.status == 201, f"Expected 201 creating programme, got {resp.status}"
    validate(instance=payload, schema=NAME_SCHEMA)
    programme = resp.json()
    assert programme == {"id": 1, "name": "Launch", "modules": []}, f"Programme mismatch: {programme}"
    expect(page.locator("#programme-title")).to_have_text("Launch")

    resp, payload = add_module(page, "Design")
    assert resp.status == 201, f"Expected 201 creating module, got {resp.status}"
    validate(instance=payload, schema=NAME_SCHEMA)
    module = resp.json()
    assert module == {"id": 1, "name": "Design", "tasks": []}, f"Module mismatch: {module}"
    expect(page.locator('.module[data-module-id="1"] h3')).to_have_text("Design")

    resp, payload = add_task(page, 1, "Wireframes", "2024-01-01", "2024-01-10")
    assert resp.status == 201, f"Expected 201 creating task, got {resp.status}"
    validate(instance=payload, schema=TASK_REQUEST_SCHEMA)
    assert resp.json() == {"id": 1, "name": "Wireframes", "start": "2024-01-01", "end": "2024-01-10"}
    expect(page.locator('.module[data-module-id="1"] .task-list li')).to_have_count(1)

    page.locator('.module[data-module-id="1"] .btn-view-chart').click()
    expect(page.locator("#chart-title")).to_have_text("Design")
    expect(page.locator("#gantt svg")).to_have_count(1)
    expect(page.locator("#gantt .bar-label")).to_contain_text("Wireframes")


def test_programmes_listed_in_selector(page, live_server_url):
    page.goto(live_server_url, wait_until="domcontentloaded")
    add_programme(page, "Scale")

    options = page.locator("#programme-select option")
    expect(options).to_have_count(3)
    texts = [t.strip() for t in options.all_text_contents()]
    assert "Launch" in texts and "Scale" in texts, f"Selector options: {texts}"
    assert texts.index("Launch") < texts.index("Scale"), f"Insertion order lost: {texts}"
