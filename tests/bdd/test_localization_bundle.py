"""Behaviour tests for the client localization bundle written by a build."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, scenarios, then, when

from ink_pages.build import BuildOrchestrator

if typ.TYPE_CHECKING:
    from conftest import ProjectBuilder

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "localization_bundle.feature"
)
scenarios(FEATURE_FILE)

BUNDLE_PREFIX = "window.ink.translations = "

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    return {}


def _bundle(project: ProjectBuilder) -> dict[str, dict[str, str]]:
    script = project.output("build/ink-lang.js").read_text(encoding="utf-8")
    line = next(line for line in script.splitlines() if line.startswith(BUNDLE_PREFIX))
    return json.loads(line.removeprefix(BUNDLE_PREFIX).removesuffix(";"))


@given("a project whose page, component and layout use translations")
def given_translated_project(project: ProjectBuilder) -> None:
    project.layout(
        "app",
        "@yield('page')\n<footer>{{ __('footer.copy') }}</footer>\n",
    )
    project.component("card", "<button>{{ trans('card.cta') }}</button>")
    project.page(
        "index",
        "<?ink\nink_make().layout('app')\n?>\n"
        "<h1>@lang('nav.home')</h1>\n<x-card />\n",
    )
    project.lang("en/nav.yaml", "home: Home\n")
    project.lang("en/card.yaml", "cta: Buy now\n")
    project.lang("en/footer.yaml", "copy: Copyright\n")
    project.lang("en/admin.yaml", "secret: Hidden\n")
    project.lang("fr/nav.yaml", "home: Accueil\n")


@when("I build the project")
def when_build(project: ProjectBuilder, scenario_state: ScenarioState) -> None:
    config = project.config(locales=["en", "fr"])
    scenario_state["result"] = BuildOrchestrator(config).build()


@then('the bundle for "en" contains "nav.home", "card.cta" and "footer.copy"')
def then_english_bundle(project: ProjectBuilder, scenario_state: ScenarioState) -> None:
    result = scenario_state["result"]
    assert result.success, result.message
    assert _bundle(project)["en"] == {
        "card.cta": "Buy now",
        "footer.copy": "Copyright",
        "nav.home": "Home",
    }


@then('the bundle for "fr" contains "nav.home"')
def then_french_bundle(project: ProjectBuilder) -> None:
    assert _bundle(project)["fr"] == {"nav.home": "Accueil"}


@then('the bundle omits "admin.secret"')
def then_unused_keys_omitted(project: ProjectBuilder) -> None:
    bundle = _bundle(project)
    assert all("admin.secret" not in messages for messages in bundle.values())
