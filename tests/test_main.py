"""测试应用工厂"""

from pathlib import Path
from typing import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from silmod.config.settings import Config
from silmod.main import create_app

BLOG_MODULE = """
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request

router = APIRouter(prefix="/blog")


@router.get("/")
async def index(request: Request):
    return host.templates.TemplateResponse(request, "blog/index.html", {"title": "Posts"})


@router.get("/missing")
async def missing():
    raise HTTPException(status_code=404, detail='Not "found"')


@router.get("/crash")
async def crash():
    raise RuntimeError('storage "s3" offline')


@router.get("/page")
async def page(number: int):
    return {"number": number}


def register(host):
    host.register_namespace("blog", Path(__file__).parent / "templates")
    host.include_router(router)
"""


@pytest.fixture
def blog_root(tmp_path: Path, make_module: Callable[..., Path]) -> Path:
    entry_point = make_module("modules/blog", BLOG_MODULE)
    templates = entry_point.parent / "templates"
    templates.mkdir()
    (templates / "index.html").write_text("<h1>{{ title }}</h1>", encoding="utf-8")
    return tmp_path / "modules"


@pytest.fixture
def app(blog_root: Path, clean_config: Config) -> FastAPI:
    return create_app({"modules": {"path": str(blog_root)}}, config=clean_config)


class TestCreateApp:
    def test_without_module_paths_skips_loading(self, clean_config: Config) -> None:
        app = create_app(config=clean_config)

        assert app.state.host.modules == []
        assert TestClient(app).get("/health").json() == {"status": "ok"}

    def test_modules_loaded_from_options(self, app: FastAPI) -> None:
        assert [d.name for d in app.state.host.modules] == ["blog"]
        assert "blog" in app.state.host.template_registry.bindings

    def test_module_paths_from_config(
        self, blog_root: Path, clean_config: Config
    ) -> None:
        clean_config.module_paths = [str(blog_root)]

        app = create_app(config=clean_config)

        assert [d.name for d in app.state.host.modules] == ["blog"]

    def test_module_paths_list(
        self, tmp_path: Path, make_module: Callable[..., Path], clean_config: Config
    ) -> None:
        make_module("first/one")
        make_module("second/two")

        app = create_app(
            {"modules": {"path": [str(tmp_path / "second"), str(tmp_path / "first")]}},
            config=clean_config,
        )

        assert [d.name for d in app.state.host.modules] == ["two", "one"]

    def test_missing_root_is_not_fatal(self, tmp_path: Path, clean_config: Config) -> None:
        app = create_app({"modules": {"path": str(tmp_path / "nowhere")}}, config=clean_config)
        assert app.state.host.modules == []

    def test_activation_failure_aborts_startup(
        self, tmp_path: Path, make_module: Callable[..., Path], clean_config: Config
    ) -> None:
        make_module("mods/a_broken", 'raise RuntimeError("cannot start")\n')
        make_module("mods/b_fine")

        with pytest.raises(RuntimeError, match="cannot start"):
            create_app({"modules": {"path": str(tmp_path / "mods")}}, config=clean_config)

    def test_module_route_renders_namespaced_template(self, app: FastAPI) -> None:
        response = TestClient(app).get("/blog/", headers={"Accept": "text/html"})

        assert response.status_code == 200
        assert response.text == "<h1>Posts</h1>"

    def test_template_options(self, tmp_path: Path, clean_config: Config) -> None:
        app = create_app({"templates": {"trim_blocks": True}}, config=clean_config)
        assert app.state.host.template_registry.environment.trim_blocks is True

    def test_modules_api(self, app: FastAPI, blog_root: Path) -> None:
        response = TestClient(app).get("/api/modules")

        assert response.status_code == 200
        [module] = response.json()
        assert module["name"] == "blog"
        assert module["root"] == str(blog_root)
        assert module["path"].endswith("autoload.py")


class TestErrorNegotiation:
    """错误协商覆盖模块注册的路由"""

    def test_http_error_json(self, app: FastAPI) -> None:
        response = TestClient(app).get("/blog/missing", headers={"Accept": "application/json"})

        assert response.status_code == 404
        assert response.content == b'{"status":"error","message":"Not found"}'

    def test_http_error_html_default(self, app: FastAPI) -> None:
        response = TestClient(app).get("/blog/missing", headers={"Accept": "text/html"})

        assert response.status_code == 404
        assert response.json() == {"detail": 'Not "found"'}

    def test_unknown_route_json(self, app: FastAPI) -> None:
        response = TestClient(app).get("/nope", headers={"Accept": "application/json"})

        assert response.status_code == 404
        assert response.json() == {"status": "error", "message": "Not Found"}

    def test_method_not_allowed_keeps_status(self, app: FastAPI) -> None:
        response = TestClient(app).post("/health", headers={"Accept": "application/json"})

        assert response.status_code == 405
        assert response.json()["status"] == "error"

    def test_validation_error_json(self, app: FastAPI) -> None:
        response = TestClient(app).get(
            "/blog/page", params={"number": "abc"}, headers={"Accept": "application/json"}
        )

        assert response.status_code == 422
        body = response.json()
        assert body["status"] == "error"
        assert body["message"].startswith("query.number:")

    def test_unhandled_exception_json(self, app: FastAPI) -> None:
        response = TestClient(app).get("/blog/crash", headers={"Accept": "application/json"})

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "storage s3 offline"}

    def test_unhandled_exception_html_default(self, app: FastAPI) -> None:
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/blog/crash", headers={"Accept": "text/html"})

        assert response.status_code == 500
        assert response.text == "Internal Server Error"


class TestMain:
    def test_empty_log_level_falls_back_to_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        import silmod.main as main_module

        calls: list[dict] = []
        monkeypatch.setattr(main_module.default_config, "log_level", "")
        monkeypatch.setattr(main_module.uvicorn, "run", lambda *args, **kwargs: calls.append(kwargs))

        main_module.main()

        assert calls[0]["log_level"] == "info"
        assert calls[0]["factory"] is True


class TestBodylessErrorStatus:
    def test_not_modified_json_client(self, clean_config: Config) -> None:
        from fastapi import HTTPException

        app = create_app(config=clean_config)

        async def cached() -> dict:
            raise HTTPException(status_code=304)

        app.state.host.add_api_route("/cached", cached, methods=["GET"])

        response = TestClient(app).get("/cached", headers={"Accept": "application/json"})

        assert response.status_code == 304
        assert response.content == b""
