"""Markdown source writer.

Renders index.md, authentication.md and one page per endpoint group:
groups/<sortIndex>-<slug>.md, so that a directory listing shows the
pages in document order.
"""

import json
import pprint
import re
from urllib.parse import urlencode

from routedoc.config import DocsConfig
from routedoc.generator.postman import query_pairs
from routedoc.models import EndpointGroup, EndpointMetadata, ExampleResponse, Parameter


def slugify(text: str) -> str:
    slug = re.sub(r"[^\w]+", "-", text.lower()).replace("_", "-")
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug or "group"


def group_filename(group: EndpointGroup) -> str:
    return f"groups/{group.sort_index}-{slugify(group.name)}.md"


def pretty_body(response: ExampleResponse) -> tuple[str, str]:
    """Return (fence language, text) for a response body."""
    try:
        data = json.loads(response.body)
    except ValueError:
        return "text", response.body
    return "json", json.dumps(data, indent=4, ensure_ascii=False)


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list, bool)):
        value = json.dumps(value, ensure_ascii=False)
    return str(value).replace("|", "\\|").replace("\n", "<br>")


def _literal(value) -> str:
    """Python source for a JSON-like value (True/None, not true/null)."""
    return pprint.pformat(value, sort_dicts=False)


class MarkdownWriter:
    """Renders endpoint groups to {relative path: Markdown text}."""

    def __init__(self, config: DocsConfig):
        self.config = config
        self.base_url = config.base_url.rstrip("/")

    def render(self, groups: list[EndpointGroup]) -> dict[str, str]:
        files = {
            "index.md": self.render_index(groups),
            "authentication.md": self.render_authentication(),
        }
        for group in groups:
            files[group_filename(group)] = self.render_group(group)
        return files

    # -- pages ----------------------------------------------------------------

    def render_index(self, groups: list[EndpointGroup]) -> str:
        lines = [f"# {self.config.title}", ""]
        if self.config.description:
            lines += [self.config.description, ""]
        if self.config.intro_text:
            lines += [self.config.intro_text.strip(), ""]
        lines += [f"Base URL: `{self.base_url}`", "", "## Contents", ""]
        for group in groups:
            lines.append(f"- [{group.name}]({group_filename(group)})")
        return "\n".join(lines).rstrip() + "\n"

    def render_authentication(self) -> str:
        auth = self.config.auth
        lines = ["# Authenticating requests", ""]
        if not auth.enabled:
            lines.append("This API is not authenticated.")
        else:
            if auth.in_ == "bearer":
                how = f'an **`Authorization`** header with the value **`"Bearer {auth.placeholder}"`**'
            elif auth.in_ == "basic":
                how = f'an **`Authorization`** header with the value **`"Basic {auth.placeholder}"`**'
            elif auth.in_ == "header":
                how = f'a **`{auth.name}`** header with the value **`"{auth.placeholder}"`**'
            else:
                how = f"a query parameter **`{auth.name}`** in the request"
            lines.append(f"To authenticate requests, include {how}.")
            lines.append("")
            lines.append("Endpoints that require authentication are marked **Requires authentication**.")
            if auth.extra_info:
                lines += ["", auth.extra_info.strip()]
        return "\n".join(lines) + "\n"

    def render_group(self, group: EndpointGroup) -> str:
        parts = [f"# {group.name}"]
        if group.description:
            parts.append(group.description)
        for endpoint in group.endpoints:
            parts.append(self.render_endpoint(endpoint))
        return "\n\n".join(parts).rstrip() + "\n"

    def render_endpoint(self, endpoint: EndpointMetadata) -> str:
        lines = [f'## {endpoint.display_title}', "", f'<a id="{endpoint.anchor}"></a>', ""]
        if endpoint.authenticated:
            lines += ["**Requires authentication**", ""]
        if endpoint.description:
            lines += [endpoint.description, ""]

        lines += ["> Example request:", ""]
        for language in self.config.example_languages:
            lines += self._example(language, endpoint) + [""]

        for response in endpoint.responses:
            heading = f"> Example response ({response.status}"
            heading += f", {response.description})" if response.description else ")"
            language, text = pretty_body(response)
            lines += [heading + ":", "", f"```{language}", text, "```", ""]

        lines += ["### Request", "", f"`{' | '.join(endpoint.methods)} {endpoint.uri}`", ""]
        lines += self._table("Headers", [(k, "", "", "", v) for k, v in self.headers(endpoint).items()])
        lines += self._parameter_table("URL Parameters", endpoint.url_parameters)
        lines += self._parameter_table("Query Parameters", endpoint.query_parameters)
        lines += self._parameter_table("Body Parameters", endpoint.body_parameters)

        if endpoint.response_fields:
            lines += ["### Response", "", "#### Response Fields", "",
                      "| Name | Type | Description |", "|------|------|-------------|"]
            for f in endpoint.response_fields:
                lines.append(f"| `{_cell(f.name)}` | {_cell(f.type)} | {_cell(f.description)} |")
            lines.append("")
        return "\n".join(lines).rstrip()

    # -- helpers --------------------------------------------------------------

    def headers(self, endpoint: EndpointMetadata) -> dict:
        """Global headers, endpoint headers, then the auth header if needed."""
        headers = {**self.config.headers, **endpoint.headers}
        auth = self.config.auth
        if auth.enabled and endpoint.authenticated:
            if auth.in_ == "bearer":
                headers["Authorization"] = f"Bearer {auth.placeholder}"
            elif auth.in_ == "basic":
                headers["Authorization"] = f"Basic {auth.placeholder}"
            elif auth.in_ == "header":
                headers[auth.name] = auth.placeholder
        return headers

    def query(self, endpoint: EndpointMetadata) -> list[tuple[str, str]]:
        pairs = []
        for param in endpoint.query_parameters:
            if param.example is not None:
                pairs += query_pairs(param.name, param.example)
        auth = self.config.auth
        if auth.enabled and endpoint.authenticated and auth.in_ == "query":
            pairs.append((auth.name, auth.placeholder))
        return pairs

    def url(self, endpoint: EndpointMetadata) -> str:
        return f"{self.base_url}/{endpoint.bound_uri().lstrip('/')}"

    def _example(self, language: str, endpoint: EndpointMetadata) -> list[str]:
        if language == "bash":
            return self._bash_example(endpoint)
        return self._python_example(endpoint)

    def _bash_example(self, endpoint: EndpointMetadata) -> list[str]:
        method = endpoint.methods[0]
        url = self.url(endpoint)
        query = self.query(endpoint)
        if query:
            url += "?" + urlencode(query)
        lines = ["```bash", f"curl --request {method} \\"]
        if method == "GET":
            lines.append(f'    --get "{url}" \\')
        else:
            lines.append(f'    "{url}" \\')
        for name, value in self.headers(endpoint).items():
            lines.append(f'    --header "{name}: {value}" \\')
        body = endpoint.cleaned_body()
        if body:
            data = json.dumps(body, ensure_ascii=False).replace("'", "'\\''")
            lines.append(f"    --data '{data}' \\")
        lines[-1] = lines[-1].rstrip(" \\")
        lines.append("```")
        return lines

    def _python_example(self, endpoint: EndpointMetadata) -> list[str]:
        method = endpoint.methods[0]
        lines = ["```python", "import requests", "", f"url = {self.url(endpoint)!r}"]
        arguments = []
        body = endpoint.cleaned_body()
        if body:
            lines.append(f"payload = {_literal(body)}")
            arguments.append("json=payload")
        query = self.query(endpoint)
        if query:
            params = {}
            for key, value in query:
                params.setdefault(key, []).append(value)
            params = {k: v[0] if len(v) == 1 else v for k, v in params.items()}
            lines.append(f"params = {_literal(params)}")
            arguments.append("params=params")
        headers = self.headers(endpoint)
        if headers:
            lines.append(f"headers = {_literal(headers)}")
            arguments.append("headers=headers")
        lines.append("")
        call_args = ", ".join([f"'{method}'", "url"] + arguments)
        lines += [f"response = requests.request({call_args})", "response.json()", "```"]
        return lines

    def _parameter_table(self, title: str, params: list[Parameter]) -> list[str]:
        rows = [
            (f"`{p.name}`", p.type, "required" if p.required else "optional", p.description, p.example)
            for p in params
        ]
        return self._table(title, rows)

    def _table(self, title: str, rows: list[tuple]) -> list[str]:
        if not rows:
            return []
        lines = [f"#### {title}", "", "| Name | Type | Required | Description | Example |",
                 "|------|------|----------|-------------|---------|"]
        for name, param_type, required, description, example in rows:
            lines.append(
                f"| {name if name.startswith('`') else _cell(name)} | {_cell(param_type)} | "
                f"{required} | {_cell(description)} | {_cell(example)} |"
            )
        lines.append("")
        return lines
