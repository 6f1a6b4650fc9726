import json
import uuid

from routedoc.config import build_config
from routedoc.generator.groups import group_endpoints
from routedoc.generator.postman import SCHEMA_URL, PostmanCollectionWriter, query_pairs
from routedoc.models import EndpointMetadata, ExampleResponse, Parameter

FIXED_ID = uuid.UUID("00000000-0000-4000-8000-000000000000")


def _writer(**config) -> PostmanCollectionWriter:
    return PostmanCollectionWriter(build_config(config), id_factory=lambda: FIXED_ID)


def _groups():
    endpoints = [
        EndpointMetadata(
            methods=["GET"],
            uri="api/users/{user}",
            title="Show a user",
            group_name="Users",
            group_description="Manage users.",
            url_parameters=[Parameter(name="user", type="integer", required=True, example=4)],
            query_parameters=[
                Parameter(name="include", required=True, example="posts", description="Relations."),
                Parameter(name="page", type="integer", example=2),
            ],
            headers={"Custom-Header": "NotSoCustom"},
            responses=[ExampleResponse(status=200, body='{"id": 4}')],
        ),
        EndpointMetadata(
            methods=["POST"],
            uri="api/users",
            group_name="Users",
            authenticated=True,
            body_parameters=[Parameter(name="name", example="Ada")],
        ),
        EndpointMetadata(methods=["GET"], uri="api/health", group_name="Admin"),
    ]
    return group_endpoints(endpoints)


class TestMakeCollection:
    def test_info(self):
        collection = _writer(title="Sample API", description="All of it.").make_collection(_groups())
        assert collection["info"] == {
            "name": "Sample API",
            "_postman_id": str(FIXED_ID),
            "description": "All of it.",
            "schema": SCHEMA_URL,
        }

    def test_folders_follow_group_order(self):
        collection = _writer().make_collection(_groups())
        assert [f["name"] for f in collection["item"]] == ["Admin", "Users"]
        users = collection["item"][1]
        assert users["description"] == "Manage users."
        assert [i["request"]["method"] for i in users["item"]] == ["GET", "POST"]

    def test_request_item(self):
        item = _writer().make_collection(_groups())["item"][1]["item"][0]
        assert item["name"] == "Show a user"
        url = item["request"]["url"]
        assert url["protocol"] == "http"
        assert url["host"] == "localhost"
        assert url["path"] == "api/users/:user"
        assert url["variable"][0]["key"] == "user"
        assert url["variable"][0]["value"] == "4"
        assert url["query"] == [
            {"key": "include", "value": "posts", "description": "Relations.", "disabled": False},
            {"key": "page", "value": "2", "description": "", "disabled": True},
        ]
        assert url["raw"] == "http://localhost/api/users/:user?include=posts"
        assert item["response"][0]["code"] == 200
        assert item["response"][0]["body"] == '{"id": 4}'

    def test_headers_are_copied_verbatim(self):
        writer = _writer(headers={"Accept": "application/json"})
        item = writer.make_collection(_groups())["item"][1]["item"][0]
        assert item["request"]["header"] == [
            {"key": "Accept", "value": "application/json"},
            {"key": "Custom-Header", "value": "NotSoCustom"},
        ]

    def test_body(self):
        item = _writer().make_collection(_groups())["item"][1]["item"][1]
        body = item["request"]["body"]
        assert body["mode"] == "raw"
        assert json.loads(body["raw"]) == {"name": "Ada"}

    def test_base_url_only_changes_host_and_protocol(self):
        local = _writer(base_url="http://localhost").make_collection(_groups())
        remote = _writer(base_url="https://yourapp.app").make_collection(_groups())
        for folder_a, folder_b in zip(local["item"], remote["item"]):
            for a, b in zip(folder_a["item"], folder_b["item"]):
                url_a, url_b = a["request"]["url"], b["request"]["url"]
                assert url_b["host"] == "yourapp.app"
                assert url_b["protocol"] == "https"
                assert url_b["raw"] == url_a["raw"].replace("http://localhost", "https://yourapp.app")
                for key in ("host", "protocol", "raw"):
                    url_a.pop(key), url_b.pop(key)
                assert url_a == url_b
                assert a["request"]["header"] == b["request"]["header"]

    def test_port(self):
        item = _writer(base_url="http://localhost:8000").make_collection(_groups())["item"][0]["item"][0]
        assert item["request"]["url"]["port"] == "8000"
        assert item["request"]["url"]["raw"] == "http://localhost:8000/api/health"

    def test_auth(self):
        collection = _writer(auth={"enabled": True, "in": "bearer", "placeholder": "{TOKEN}"}).make_collection(_groups())
        assert collection["auth"]["type"] == "bearer"
        assert collection["auth"]["bearer"][0]["value"] == "{TOKEN}"
        users = collection["item"][1]["item"]
        assert users[0]["request"]["auth"] == {"type": "noauth"}
        assert "auth" not in users[1]["request"]

    def test_no_auth_when_disabled(self):
        collection = _writer().make_collection(_groups())
        assert "auth" not in collection
        assert "auth" not in collection["item"][1]["item"][0]["request"]


class TestToJson:
    def test_stable_output(self):
        assert _writer().to_json(_groups()) == _writer().to_json(_groups())

    def test_unicode_is_kept(self):
        groups = group_endpoints([
            EndpointMetadata(
                methods=["GET"],
                uri="api/utf8",
                group_name="Group A",
                responses=[ExampleResponse(body='{"result": "Лорем ипсум"}')],
            )
        ])
        text = _writer().to_json(groups)
        assert "Лорем ипсум" in text
        assert text.endswith("\n")


def test_query_pairs():
    assert query_pairs("ids", [1, 2]) == [("ids[]", "1"), ("ids[]", "2")]
    assert query_pairs("flag", True) == [("flag", "1")]
    assert query_pairs("missing", None) == [("missing", "")]
