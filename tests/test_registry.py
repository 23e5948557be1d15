import pytest

from portfolio_engine.adapters import default_sources
from portfolio_engine.adapters.source_adapters import SourceConfig
from portfolio_engine.errors import ValidationError
from portfolio_engine.registry import SourceRegistry
from portfolio_engine.settings import EngineSettings

SOURCE_ORDER = [
    "Joule",
    "Aave",
    "Hyperion",
    "Tapp Exchange",
    "Amnis Finance",
    "KoFi Finance",
    "Echelon",
]


def test_default_sources_keep_declaration_order():
    """Default sources are registered in declaration order."""
    sources = default_sources(EngineSettings())

    assert [s.name for s in sources] == SOURCE_ORDER
    assert all(s.enabled for s in sources)


def test_default_sources_honour_disabled_list():
    """Sources named in disabled_sources start disabled."""
    sources = default_sources(EngineSettings(disabled_sources=["tapp exchange", "AAVE"]))

    disabled = [s.name for s in sources if not s.enabled]
    assert disabled == ["Aave", "Tapp Exchange"]


def test_post_sources_send_json_bodies():
    """POST sources carry their JSON request bodies."""
    sources = {s.name: s for s in default_sources(EngineSettings())}

    assert sources["Aave"].method == "POST"
    assert sources["Aave"].url.endswith("/v1/view")
    assert sources["Aave"].body["function"].endswith(
        "::ui_pool_data_provider_v3::get_reserves_data"
    )
    assert sources["Tapp Exchange"].body["method"] == "public/pool"
    assert sources["Joule"].url.endswith("?protocol=Joule")
    assert sources["Joule"].to_dict()["transform"] == "default"


def test_set_enabled_replaces_snapshot():
    """Toggling a source swaps the snapshot instead of mutating it."""
    registry = SourceRegistry(default_sources(EngineSettings()))
    before = registry.snapshot()

    updated = registry.set_enabled("Hyperion", False)

    assert updated.enabled is False
    assert registry.get("Hyperion").enabled is False
    assert "Hyperion" not in [s.name for s in registry.enabled()]
    # snapshots taken earlier are untouched
    assert next(s for s in before if s.name == "Hyperion").enabled is True
    assert [s.name for s in registry.snapshot()] == SOURCE_ORDER


def test_set_enabled_unknown_source():
    """Toggling an unknown source should raise."""
    registry = SourceRegistry([SourceConfig(name="A", url="https://a")])

    with pytest.raises(ValidationError) as exc_info:
        registry.set_enabled("B", True)

    assert exc_info.value.code == "unknown_source"


def test_add_source_appends_and_rejects_duplicates():
    """Added sources go last and duplicate names are rejected."""
    registry = SourceRegistry([SourceConfig(name="A", url="https://a")])

    registry.add_source(SourceConfig(name="B", url="https://b"))

    assert [s.name for s in registry.snapshot()] == ["A", "B"]
    with pytest.raises(ValidationError, match="already registered"):
        registry.add_source(SourceConfig(name="A", url="https://other"))


def test_duplicate_names_rejected_at_construction():
    """A registry cannot start with two sources of the same name."""
    with pytest.raises(ValueError, match="Duplicate"):
        SourceRegistry(
            [SourceConfig(name="A", url="https://a"), SourceConfig(name="A", url="https://b")]
        )
