from pathlib import Path
from types import MappingProxyType

import pytest

from routedoc.config import build_config
from routedoc.errors import ConfigurationError
from routedoc.examples import ExampleGenerator
from routedoc.extractor import Extractor, LogEntry
from routedoc.routing.matcher import match_routes
from routedoc.routing.router import Router
from routedoc.strategies.base import Strategy
from sample_app import DemoController, PartialResourceController, build_router, closure

FIXTURES = Path(__file__).parent / "fixtures"


def _config(**overrides):
    data = {"faker_seed": 1234, "response_files_dir": str(FIXTURES / "responses")}
    data.update(overrides)
    return build_config(data)


def _extract(router, config=None, **kwargs):
    config = config or _config()
    lines = []
    extractor = Extractor(config, router, echo=lines.append, **kwargs)
    endpoints = extractor.extract(match_routes(router, config.routes))
    return endpoints, lines, extractor


def _demo(*actions, method="get"):
    router = Router()
    for action in actions:
        getattr(router, method)(f"/api/{action}", (DemoController, action))
    return router


def with_response_tag_and_missing_file():
    """
    @response {"found": true}
    @responseFile i-do-not-exist.json
    """


def with_bare_response_field():
    """
    @responseField
    """


def with_broken_response_file_overrides():
    """
    @responseFile users.json {"name":
    """


class TitleStrategy(Strategy):
    owns = frozenset({"title"})

    def contribute(self, route, endpoint):
        return {"title": "From strategy"}


class OtherTitleStrategy(TitleStrategy):
    pass


class HeaderStrategy(Strategy):
    owns = frozenset({"headers"})
    merges = frozenset({"headers"})

    def __init__(self, config, examples, invoker=None, headers=None):
        super().__init__(config, examples, invoker)
        self.headers = headers or {}

    def contribute(self, route, endpoint):
        return {"headers": self.headers}


class GreedyStrategy(Strategy):
    owns = frozenset({"title"})

    def contribute(self, route, endpoint):
        return {"title": "x", "description": "not mine"}


class SpyStrategy(Strategy):
    owns = frozenset({"description"})

    def __init__(self, config, examples, invoker=None):
        super().__init__(config, examples, invoker)
        self.seen = []

    def contribute(self, route, endpoint):
        self.seen.append(endpoint)
        return None


class TestLogLines:
    def test_processed_and_hidden(self):
        _, lines, extractor = _extract(build_router(), _config(routes=[{"match": {"prefixes": ["api/*"]}}]))
        assert lines[0] == "Processed route: [GET] api/test"
        assert "Skipping route: [GET] api/skip - @hideFromAPIDocumentation was specified" in lines
        assert extractor.skipped_count == 1
        assert extractor.processed_count == 5

    def test_filtered_routes_are_not_reported(self):
        _, lines, _ = _extract(build_router(), _config(routes=[{"match": {"prefixes": ["api/*"]}}]))
        assert not any("internal/health" in line for line in lines)

    def test_missing_response_file_skips_route(self):
        endpoints, lines, _ = _extract(_demo("with_non_existent_response_file", "with_response_tag"))
        assert lines[0] == (
            "Skipping route: [GET] api/with_non_existent_response_file"
            " - @responseFile i-do-not-exist.json does not exist"
        )
        assert lines[1] == "Processed route: [GET] api/with_response_tag"
        assert [e.uri for e in endpoints] == ["api/with_response_tag"]

    def test_bare_response_field_skips_route(self):
        router = Router()
        router.get("/api/a", with_bare_response_field)
        router.get("/api/b", with_response_tag_and_missing_file)
        endpoints, lines, _ = _extract(router)
        assert lines == [
            "Skipping route: [GET] api/a - Response field tag has no name",
            "Processed route: [GET] api/b",
        ]
        assert [e.uri for e in endpoints] == ["api/b"]

    def test_invalid_response_file_overrides_skip_route(self):
        router = Router()
        router.get("/api/a", with_broken_response_file_overrides)
        _, lines, _ = _extract(router)
        assert lines == ["Skipping route: [GET] api/a - @responseFile users.json has invalid JSON overrides"]

    def test_unresolvable_handlers_are_skipped(self):
        router = Router()
        router.resource("/api/users", PartialResourceController)
        endpoints, lines, extractor = _extract(router)
        assert [e.uri for e in endpoints] == ["api/users", "api/users/{user}"]
        assert extractor.skipped_count == 5
        assert lines[1].startswith("Skipping route: [GET] api/users/create - ")

    def test_missing_api_resource_skips_route(self):
        _, lines, _ = _extract(_demo("with_missing_api_resource"))
        assert lines[0].startswith("Skipping route: [GET] api/with_missing_api_resource - @apiResource sample_app:Missing")

    def test_log_entry_line(self):
        assert LogEntry(True, "[GET] api/a").line == "Processed route: [GET] api/a"
        assert LogEntry(False, "[GET] api/a").line == "Skipping route: [GET] api/a"


class TestOrdering:
    def test_endpoints_follow_match_order(self):
        router = Router()
        router.get("/api/zebra", closure)
        router.get("/api/apple", closure)
        router.post("/api/zebra", closure)
        endpoints, _, _ = _extract(router)
        assert [(e.methods, e.uri) for e in endpoints] == [
            (["GET"], "api/zebra"),
            (["GET"], "api/apple"),
            (["POST"], "api/zebra"),
        ]

    def test_same_seed_same_output(self):
        first, _, _ = _extract(build_router())
        second, _, _ = _extract(build_router())
        assert first == second


class TestStrategyContract:
    def test_duplicate_owner_is_a_configuration_error(self):
        config = _config()
        examples = ExampleGenerator(1)
        with pytest.raises(ConfigurationError):
            Extractor(config, Router(), strategies=[
                TitleStrategy(config, examples),
                OtherTitleStrategy(config, examples),
            ])

    def test_merging_owners_are_allowed(self):
        config = _config()
        examples = ExampleGenerator(1)
        router = Router()
        router.get("/api/a", closure)
        endpoints, _, _ = _extract(router, config, strategies=[
            HeaderStrategy(config, examples, headers={"A": "1", "B": "1"}),
            HeaderStrategy(config, examples, headers={"B": "2"}),
        ])
        assert endpoints[0].headers == {"A": "1", "B": "2"}

    def test_writing_unowned_field_aborts(self):
        config = _config()
        router = Router()
        router.get("/api/a", closure)
        extractor = Extractor(config, router, strategies=[GreedyStrategy(config, ExampleGenerator(1))],
                              echo=lambda line: None)
        with pytest.raises(ConfigurationError):
            extractor.extract(match_routes(router, config.routes))

    def test_later_strategies_see_a_read_only_view(self):
        config = _config()
        examples = ExampleGenerator(1)
        spy = SpyStrategy(config, examples)
        router = Router()
        router.get("/api/a", closure)
        _extract(router, config, strategies=[TitleStrategy(config, examples), spy])
        view = spy.seen[0]
        assert isinstance(view, MappingProxyType)
        assert view["title"] == "From strategy"
        with pytest.raises(TypeError):
            view["title"] = "changed"

    def test_unknown_strategy_name(self):
        with pytest.raises(ConfigurationError):
            Extractor(_config(strategies=["metadata", "no_such_strategy"]), Router())

    def test_unknown_response_strategy_name(self):
        with pytest.raises(ConfigurationError):
            Extractor(_config(response_strategies=["response_tag", "nope"]), Router())

    def test_missing_group_falls_back_to_default(self):
        config = _config(strategies=["url_parameters"], default_group="Misc")
        router = Router()
        router.get("/api/a", closure)
        endpoints, _, _ = _extract(router, config)
        assert endpoints[0].group_name == "Misc"


class TestResponseChain:
    def test_first_strategy_with_responses_wins(self):
        router = Router()
        router.get("/api/a", with_response_tag_and_missing_file)
        endpoints, lines, _ = _extract(router)
        assert lines == ["Processed route: [GET] api/a"]
        assert endpoints[0].responses[0].body == '{"found": true}'

    def test_chain_order_is_configurable(self):
        router = Router()
        router.get("/api/a", with_response_tag_and_missing_file)
        config = _config(response_strategies=["response_file", "response_tag"])
        endpoints, lines, _ = _extract(router, config)
        assert endpoints == []
        assert lines[0].endswith("@responseFile i-do-not-exist.json does not exist")
