import ast

from routedoc.config import build_config
from routedoc.generator.groups import group_endpoints
from routedoc.generator.markdown import MarkdownWriter, group_filename, slugify
from routedoc.models import EndpointMetadata, ExampleResponse, Parameter, ResponseField


def _writer(**config) -> MarkdownWriter:
    return MarkdownWriter(build_config(config))


def _endpoint(**kwargs) -> EndpointMetadata:
    data = {"methods": ["GET"], "uri": "api/test", "group_name": "Group A"}
    data.update(kwargs)
    return EndpointMetadata(**data)


def _squash(text: str) -> str:
    return "".join(text.split())


def _code_block(text: str, language: str) -> str:
    start = text.index(f"```{language}\n") + len(language) + 4
    return text[start:text.index("```", start)]


class TestRender:
    def test_files(self):
        groups = group_endpoints([_endpoint(), _endpoint(group_name="Users")])
        files = _writer().render(groups)
        assert set(files) == {"index.md", "authentication.md", "groups/0-group-a.md", "groups/1-users.md"}

    def test_index_links_groups_in_order(self):
        groups = group_endpoints([_endpoint(group_name="Users"), _endpoint()])
        index = _writer(title="Sample API").render(groups)["index.md"]
        assert index.startswith("# Sample API\n")
        assert index.index("groups/0-group-a.md") < index.index("groups/1-users.md")

    def test_group_page(self):
        groups = group_endpoints([
            _endpoint(title="Example title.", description="Long description.", group_description="About A."),
        ])
        page = _writer().render(groups)["groups/0-group-a.md"]
        assert page.startswith("# Group A\n\nAbout A.")
        assert "## Example title." in page
        assert "Long description." in page
        assert "`GET api/test`" in page


class TestEndpoint:
    def test_headers_appear_verbatim(self):
        ep = _endpoint(headers={"Authorization": "customAuthToken", "Custom-Header": "NotSoCustom"})
        text = _writer().render_endpoint(ep)
        assert _squash('--header "Authorization: customAuthToken"') in _squash(text)
        assert _squash('--header "Custom-Header: NotSoCustom"') in _squash(text)
        assert _squash("'Custom-Header': 'NotSoCustom'") in _squash(text)

    def test_bash_example(self):
        ep = _endpoint(
            uri="api/users/{user}",
            url_parameters=[Parameter(name="user", example=4)],
            query_parameters=[Parameter(name="page", example=2)],
        )
        text = _writer(base_url="http://yourapp.app").render_endpoint(ep)
        assert 'curl --request GET \\' in text
        assert '--get "http://yourapp.app/api/users/4?page=2"' in text

    def test_body_example(self):
        ep = _endpoint(methods=["POST"], body_parameters=[Parameter(name="user.name", example="Ada")])
        text = _writer().render_endpoint(ep)
        assert """--data '{"user": {"name": "Ada"}}'""" in text
        assert "json=payload" in text

    def test_python_example_is_valid_python(self):
        ep = _endpoint(
            methods=["POST"],
            body_parameters=[
                Parameter(name="active", type="boolean", example=True),
                Parameter(name="meta", type="object", example={"parent": None, "tags": ["a"]}),
                Parameter(name="quote", example="it's"),
            ],
            query_parameters=[Parameter(name="archived", example="false")],
            headers={"Content-Type": "application/json"},
        )
        text = _writer(base_url="http://yourapp.app").render_endpoint(ep)
        snippet = _code_block(text, "python")
        tree = ast.parse(snippet)
        assignments = {
            node.targets[0].id: ast.literal_eval(node.value)
            for node in tree.body
            if isinstance(node, ast.Assign)
        }
        assert assignments["url"] == "http://yourapp.app/api/test"
        assert assignments["payload"] == {"active": True, "meta": {"parent": None, "tags": ["a"]}, "quote": "it's"}
        assert assignments["params"] == {"archived": "false"}
        assert assignments["headers"] == {"Content-Type": "application/json"}

    def test_only_configured_languages(self):
        text = _writer(example_languages=["bash"]).render_endpoint(_endpoint())
        assert "```bash" in text
        assert "```python" not in text

    def test_responses(self):
        ep = _endpoint(responses=[
            ExampleResponse(status=200, body='{"id":4}'),
            ExampleResponse(status=401, description="unauthenticated", body='{"message": "No."}'),
            ExampleResponse(status=200, body="plain", content_type="text/plain"),
        ])
        text = _writer().render_endpoint(ep)
        assert "> Example response (200):" in text
        assert "> Example response (401, unauthenticated):" in text
        assert '```json\n{\n    "id": 4\n}\n```' in text
        assert "```text\nplain\n```" in text

    def test_utf8(self):
        ep = _endpoint(responses=[ExampleResponse(body='{"result": "Лорем ипсум долор сит амет"}')])
        assert "Лорем ипсум долор сит амет" in _writer().render_endpoint(ep)

    def test_parameter_tables(self):
        ep = _endpoint(
            query_parameters=[Parameter(name="page", type="integer", required=True, description="Page.", example=4)],
            body_parameters=[Parameter(name="note", description="A | B", example="x")],
        )
        text = _writer().render_endpoint(ep)
        assert "#### Query Parameters" in text
        assert "| `page` | integer | required | Page. | 4 |" in text
        assert "| `note` | string | optional | A \\| B | x |" in text
        assert "#### URL Parameters" not in text

    def test_response_fields(self):
        ep = _endpoint(response_fields=[ResponseField(name="id", type="integer", description="The id.")])
        assert "| `id` | integer | The id. |" in _writer().render_endpoint(ep)


class TestAuth:
    def test_authenticated_endpoint(self):
        writer = _writer(auth={"enabled": True, "in": "bearer", "placeholder": "{TOKEN}"})
        text = writer.render_endpoint(_endpoint(authenticated=True))
        assert "**Requires authentication**" in text
        assert '--header "Authorization: Bearer {TOKEN}"' in text

    def test_query_auth(self):
        writer = _writer(auth={"enabled": True, "in": "query", "name": "api_key", "placeholder": "KEY"})
        text = writer.render_endpoint(_endpoint(authenticated=True))
        assert "api/test?api_key=KEY" in text

    def test_authentication_page(self):
        files = _writer(auth={"enabled": True, "in": "header", "name": "X-Key"}).render([])
        assert "**`X-Key`**" in files["authentication.md"]
        assert "not authenticated" in _writer().render([])["authentication.md"]


def test_slugify():
    assert slugify("1. Group 1") == "1-group-1"
    assert slugify("User management") == "user-management"
    assert slugify("***") == "group"


def test_group_filename():
    group = group_endpoints([_endpoint(group_name="10. Group 10")])[0]
    assert group_filename(group) == "groups/0-10-group-10.md"
