# gomek

A small WSGI web framework built on werkzeug and Jinja2. You register routes
with a chained API, attach plain view functions or REST-style resources,
render Jinja2 templates inside a base layout, and wrap every route in
middleware such as CORS, request logging or authorization.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Handlers and views

Two kinds of callables appear throughout the package:

- a **view** is `view(response, request, data)`: it receives a werkzeug
  `Response` to fill in, the werkzeug `Request`, and a dictionary whose
  contents become the template context;
- a **handler** is `handler(response, request)`; a **middleware** takes a
  handler and returns a new handler.

## A first application

```python
from gomek.app import Config, new
from gomek.middleware import cors, logging_middleware


def home(response, request, data):
    data["heading"] = "Welcome"


app = new(Config(base_template_name="layout"))
app.base_templates("./templates/layout.html", "./templates/navbar.html")

app.route("/").view(home).methods("GET").templates("./templates/home.html")

app.use(logging_middleware)
app.use(cors)

app.set_host("localhost")
app.listen(5000)
app.start()
```

`start()` registers every route and serves with werkzeug's development
server until `shutdown()` is called (from another thread). `App` is itself a
WSGI application, so after `app.setup()` it can be handed to any WSGI server
instead; `setup()` returns the `host:port` address.

Defaults applied by `setup()`: the host is `localhost`, the port is `5000`,
and the base template name is `layout`. `methods(...)` with no arguments
means `GET`, and `OPTIONS` is always added to the list. A request whose
method is not in the route's list gets an empty response.

Middleware added with `use()` wraps the route handlers in the order given,
so the last one added runs first.

## Templates

When a route has templates, the base templates from `base_templates(...)`
are loaded together with the route's own, and the template named by
`Config.base_template_name` is rendered with the view's `data` dictionary.
Each file can be referred to inside templates by its file name
(`navbar.html`) or its stem (`navbar`). Templates use Jinja2 syntax with
autoescaping on. A file that cannot be read or parsed raises; an error while
rendering is logged and the response is left as the view wrote it.

With `Config(debug=True)`, `setup()` prints each route with its templates
and partials (`gomek.templates.log_templates`).

## Resources

A resource groups the handlers for one path by HTTP method.

```python
from gomek.app import Resource
from gomek.jsonresp import write_json


class Notice(Resource):
    def get(self, response, request, data):
        write_json(response, {"name": "Ram"}, 200)

    def post(self, response, request, data):
        write_json(response, {"name": "Joe"}, 200)

    def put(self, response, request, data):
        write_json(response, {"name": "Cosmo"}, 200)

    def delete(self, response, request, data):
        write_json(response, {"name": "Alex"}, 200)


app.route("/notices").resource(Notice()).methods("GET", "POST")
```

Once set, a resource stays the current resource for the routes registered
after it, so register resource routes after plain view routes.

`write_json(response, value, status)` writes compact JSON with the
`application/json` content type; dataclass instances are serialised as
dictionaries. If the value cannot be serialised the status becomes 500 and
the error is logged.

## Path variables and query parameters

A route segment written as `<name>` captures that part of the URL. Such a
route is registered under its first segment (`/blogs/`), and requests for
`/blogs/<value>` reach it.

```python
from gomek.app import args, get_params


def blog(response, request, data):
    blog_id = args(request)["blog_id"]
    page = get_params(request, "page")[0]


app.route("/blogs/<blog_id>").view(blog).methods("GET")
```

`args` returns `None` when the route has no path variables. `get_params`
returns every value of a query parameter and raises `KeyError` when it is
absent.

## Authorization

`authorize` takes a list of `[path, method]` pairs that are let through
without a check, and a callback for every other request. The callback
returns a pair: whether the request may proceed, and either `None` or a
replacement request to pass on. A path holding a single `*` allows every
path that starts with the part before the `*`.

```python
from gomek.middleware import authorize

white_list = [["/", "GET"], ["/login", "GET"], ["/static/*", "GET"]]


def check(request):
    return request.headers.get("Authorization") == "Bearer token", None


app.use(authorize(white_list, check))
```

Requests that fail the check receive `401 Unauthorized`.

## Testing views

`new_test_app` builds an application whose `start()` only registers routes,
and `create_test_handler` returns a handler that runs a single view for
requests matching the app's routes and methods.

```python
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request, Response

from gomek.app import Config, new_test_app
from gomek.testing import create_test_handler

test_app = new_test_app(Config())
test_app.route("/blogs").methods("GET", "POST").resource(Notice())
test_app.start()

handler = create_test_handler(test_app, Notice().get)

request = Request(EnvironBuilder(path="/blogs", method="GET").get_environ())
response = Response()
handler(response, request)
assert response.get_data(as_text=True) == '{"name":"Ram"}'
```

## What it does not do

The package has no command-line program; applications are started from
Python with `App.start()` or served by another WSGI server. It does not
serve HTTPS itself: the `protocol` setting only appears in the start-up log
message.