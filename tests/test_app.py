import json

import pytest
from werkzeug.test import Client, EnvironBuilder
from werkzeug.wrappers import Response

from gomek.app import (
    App,
    Config,
    ServeMux,
    TestApp,
    args,
    get_params,
    new,
    new_test_app,
)
from gomek.jsonresp import write_json
from gomek.middleware import authorize, cors


def hello(response, request, data):
    write_json(response, {"msg": "hello"}, 200)


def show_args(response, request, data):
    write_json(response, args(request), 200)


def test_methods_default_adds_get_and_options():
    app = App(Config())
    assert app.methods() is app
    assert app.current_methods == ["GET", "OPTIONS"]


def test_methods_appends_options():
    app = App(Config())
    app.methods("GET", "POST")
    assert app.current_methods == ["GET", "POST", "OPTIONS"]


def test_route_stores_previous_route():
    app = App(Config())
    app.route("/a").view(hello).methods("GET")
    app.route("/b")
    assert [v.route for v in app.view_store.stored_views] == ["/a"]
    assert app.view_store.stored_views[0].methods == ["GET", "OPTIONS"]
    assert app.current_route == "/b"


def test_route_with_path_variable_is_stored_under_root():
    app = App(Config())
    app.route("/blogs/<id>").view(hello)
    app.route("/other")
    stored = app.view_store.stored_views[0]
    assert stored.route == "/blogs/"
    assert stored.root_name == "blogs"
    assert stored.registered_route == "/blogs/<id>"
    assert stored.route_paths == ["blogs", "<id>"]


def test_setup_applies_defaults():
    app = new(Config())
    app.route("/").view(hello)
    assert app.setup() == "localhost:5000"
    assert app.config.base_template_name == "layout"
    assert app.protocol == "http"


def test_set_host_and_listen():
    app = App(Config())
    app.set_host("0.0.0.0")
    app.listen(8080)
    app.route("/").view(hello)
    assert app.setup() == "0.0.0.0:8080"


def test_setup_without_routes_raises():
    app = App(Config())
    with pytest.raises(ValueError):
        app.setup()


def test_base_templates_sets_config():
    app = App(Config())
    app.base_templates("layout.html", "nav.html")
    assert app.config.base_templates == ["layout.html", "nav.html"]


def test_serves_registered_view():
    app = App(Config())
    app.route("/hello").view(hello).methods("GET")
    app.setup()
    resp = Client(app).get("/hello")
    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == '{"msg":"hello"}'


def test_method_not_allowed_writes_nothing():
    app = App(Config())
    app.route("/hello").view(hello).methods("GET")
    app.setup()
    resp = Client(app).post("/hello")
    assert resp.status_code == 200
    assert resp.get_data() == b""


def test_unknown_path_is_404():
    app = App(Config())
    app.route("/hello").view(hello).methods("GET")
    app.setup()
    resp = Client(app).get("/missing")
    assert resp.status_code == 404
    assert resp.get_data(as_text=True) == "404 page not found\n"


def test_path_variables_reach_view():
    app = App(Config())
    app.route("/users/<user_id>").view(show_args).methods("GET")
    app.setup()
    resp = Client(app).get("/users/42")
    assert json.loads(resp.get_data(as_text=True)) == {"user_id": "42"}


def test_root_without_slash_redirects():
    app = App(Config())
    app.route("/users/<user_id>").view(show_args).methods("GET")
    app.setup()
    resp = Client(app).get("/users")
    assert resp.status_code == 301
    assert resp.headers["Location"] == "/users/"


def test_cors_middleware_answers_options():
    app = App(Config())
    app.use(cors)
    app.route("/hello").view(hello).methods("GET")
    app.setup()
    resp = Client(app).options("/hello")
    assert resp.status_code == 200
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert resp.get_data() == b""


def test_authorize_middleware():
    app = App(Config())
    app.use(authorize([["/hello", "GET"]], lambda request: (False, None)))
    app.route("/hello").view(hello).methods("GET")
    app.route("/private").view(hello).methods("GET")
    app.setup()
    client = Client(app)
    assert client.get("/hello").status_code == 200
    assert client.get("/private").status_code == 401


def test_template_rendering(tmp_path):
    layout = tmp_path / "layout.html"
    layout.write_text("<h1>{{ heading }}</h1>", encoding="utf-8")
    home = tmp_path / "home.html"
    home.write_text("home", encoding="utf-8")

    def home_view(response, request, data):
        data["heading"] = "Hi"

    app = App(Config())
    app.base_templates(str(layout))
    app.route("/").view(home_view).methods("GET")
    app.templates(str(home))
    app.setup()
    resp = Client(app).get("/")
    assert resp.get_data(as_text=True) == "<h1>Hi</h1>"


def test_debug_logs_registered_templates(capsys):
    app = App(Config(debug=True))
    app.base_templates("base.html")
    app.route("/").view(hello)
    app.templates("home.html")
    app.setup()
    out = capsys.readouterr().out
    assert "[Registering Templates]:" in out
    assert "\t- Route: /\n" in out
    assert "home.html" in out
    assert app.registered_templates[0].partials == ["base.html"]


def test_servemux_rejects_duplicates_and_empty_patterns():
    mux = ServeMux()
    mux.handle_func("/a", lambda response, request: None)
    with pytest.raises(ValueError):
        mux.handle_func("/a", lambda response, request: None)
    with pytest.raises(ValueError):
        mux.handle_func("", lambda response, request: None)


def test_servemux_longest_subtree_wins():
    mux = ServeMux()
    mux.handle_func("/", lambda response, request: response.set_data(b"root"))
    mux.handle_func("/api/", lambda response, request: response.set_data(b"api"))
    request = EnvironBuilder(path="/api/items").get_request()
    response = Response()
    mux.dispatch(request, response)
    assert response.get_data() == b"api"
    other = Response()
    mux.dispatch(EnvironBuilder(path="/else").get_request(), other)
    assert other.get_data() == b"root"


def test_get_params():
    request = EnvironBuilder(path="/users", query_string="user_id=1").get_request()
    assert get_params(request, "user_id") == ["1"]
    with pytest.raises(KeyError):
        get_params(request, "missing")


def test_args_without_variables_is_none():
    request = EnvironBuilder(path="/").get_request()
    assert args(request) is None


def test_shutdown_without_server_raises():
    with pytest.raises(RuntimeError):
        App(Config()).shutdown()


def test_test_app_start_registers_routes():
    app = new_test_app(Config())
    assert isinstance(app, TestApp)
    app.route("/hello").view(hello).methods("GET")
    assert app.start() is None
    resp = Client(app).get("/hello")
    assert resp.get_data(as_text=True) == '{"msg":"hello"}'