"""Postman Collection v2.1 writer.

One folder per endpoint group, one request item per endpoint. The output
is stable: the same groups always give the same JSON, apart from the
random `_postman_id`.
"""

import json
import uuid
from http import HTTPStatus
from urllib.parse import urlencode, urlparse

from routedoc.config import DocsConfig
from routedoc.models import PLACEHOLDER, EndpointGroup, EndpointMetadata, ExampleResponse

SCHEMA_URL = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"


class PostmanCollectionWriter:
    """Builds a Postman collection from endpoint groups."""

    def __init__(self, config: DocsConfig, id_factory=uuid.uuid4):
        self.config = config
        self.id_factory = id_factory
        base = urlparse(config.base_url if "://" in config.base_url else f"http://{config.base_url}")
        self.protocol = base.scheme or "http"
        self.host = base.hostname or "localhost"
        self.port = str(base.port) if base.port else ""
        self.base_path = base.path.strip("/")

    def make_collection(self, groups: list[EndpointGroup]) -> dict:
        collection = {
            "info": {
                "name": self.config.title,
                "_postman_id": str(self.id_factory()),
                "description": self.config.postman.description or self.config.description,
                "schema": SCHEMA_URL,
            },
            "item": [self._folder(group) for group in groups],
        }
        auth = self._collection_auth()
        if auth:
            collection["auth"] = auth
        return collection

    def to_json(self, groups: list[EndpointGroup]) -> str:
        return json.dumps(self.make_collection(groups), indent=4, ensure_ascii=False) + "\n"

    def _folder(self, group: EndpointGroup) -> dict:
        return {
            "name": group.name,
            "description": group.description,
            "item": [self._request_item(endpoint) for endpoint in group.endpoints],
        }

    def _request_item(self, endpoint: EndpointMetadata) -> dict:
        request = {
            "url": self._url(endpoint),
            "method": endpoint.methods[0],
            "header": [{"key": k, "value": v} for k, v in self.headers(endpoint).items()],
            "description": endpoint.description,
        }
        body = endpoint.cleaned_body()
        if body:
            request["body"] = {
                "mode": "raw",
                "raw": json.dumps(body, ensure_ascii=False),
                "options": {"raw": {"language": "json"}},
            }
        if self.config.auth.enabled and not endpoint.authenticated:
            request["auth"] = {"type": "noauth"}
        return {
            "name": endpoint.display_title,
            "request": request,
            "response": [self._response(r) for r in endpoint.responses],
        }

    def headers(self, endpoint: EndpointMetadata) -> dict:
        """Global headers, then the endpoint's own; later layers win."""
        return {**self.config.headers, **endpoint.headers}

    def _url(self, endpoint: EndpointMetadata) -> dict:
        path = PLACEHOLDER.sub(lambda m: f":{m.group(1)}", endpoint.uri.strip("/"))
        if self.base_path:
            path = f"{self.base_path}/{path}" if path else self.base_path

        query = []
        for param in endpoint.query_parameters:
            for key, value in query_pairs(param.name, param.example):
                query.append({
                    "key": key,
                    "value": value,
                    "description": param.description,
                    "disabled": not param.required,
                })

        host = f"{self.host}:{self.port}" if self.port else self.host
        raw = f"{self.protocol}://{host}/{path}"
        enabled = [(q["key"], q["value"]) for q in query if not q["disabled"]]
        if enabled:
            raw += "?" + urlencode(enabled)

        url = {
            "protocol": self.protocol,
            "host": self.host,
            "path": path,
            "query": query,
            "raw": raw,
        }
        if self.port:
            url["port"] = self.port
        if endpoint.url_parameters:
            url["variable"] = [
                {
                    "id": p.name,
                    "key": p.name,
                    "value": "" if p.example is None else str(p.example),
                    "description": p.description,
                }
                for p in endpoint.url_parameters
            ]
        return url

    def _response(self, response: ExampleResponse) -> dict:
        try:
            status = HTTPStatus(response.status).phrase
        except ValueError:
            status = ""
        return {
            "name": response.description or f"{response.status} {status}".strip(),
            "status": status,
            "code": response.status,
            "header": [{"key": "Content-Type", "value": response.content_type}],
            "body": response.body,
            "_postman_previewlanguage": "json" if response.content_type == "application/json" else "text",
        }

    def _collection_auth(self) -> dict | None:
        auth = self.config.auth
        if not auth.enabled:
            return None
        value = auth.use_value or auth.placeholder
        if auth.in_ == "bearer":
            return {"type": "bearer", "bearer": [{"key": "token", "value": value, "type": "string"}]}
        if auth.in_ == "basic":
            return {"type": "basic", "basic": [{"key": "password", "value": value, "type": "string"}]}
        return {
            "type": "apikey",
            "apikey": [
                {"key": "in", "value": auth.in_, "type": "string"},
                {"key": "key", "value": auth.name, "type": "string"},
                {"key": "value", "value": value, "type": "string"},
            ],
        }


def query_pairs(name: str, value) -> list[tuple[str, str]]:
    if value is None:
        return [(name, "")]
    if isinstance(value, list):
        key = name if name.endswith("[]") else f"{name}[]"
        return [(key, query_text(v)) for v in value]
    return [(name, query_text(value))]


def query_text(value) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)
