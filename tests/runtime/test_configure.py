"""Tests for the build context and a full configuration run."""

from __future__ import annotations

from pathlib import Path

import pytest

from cmakebase.config.schema import ProjectConfig
from cmakebase.core.compiler import BuildMode, CompilerFamily
from cmakebase.core.target import ApplyOutcome
from cmakebase.env.layers import COMMON_RANK, VariableLayer
from cmakebase.errors import ConfigurationError, LayerNotFoundError
from cmakebase.runtime.cache import ConfigCache
from cmakebase.runtime.config_loader import load_project_config
from cmakebase.runtime.configure import configure_project
from cmakebase.runtime.context import BuildContext
from cmakebase.toolchains.descriptor import BUILTIN_TOOLCHAINS, ToolchainRegistry


@pytest.fixture(autouse=True)
def _reset_toolchains():
    ToolchainRegistry.get_instance().reset()
    yield
    ToolchainRegistry.get_instance().reset()


def test_context_precedence() -> None:
    common = VariableLayer("common", COMMON_RANK, {"X": "common", "CMAKE_C_COMPILER": "gcc"})
    cache = ConfigCache({"X": "cache", "Y": "cache"})

    context = BuildContext.create(
        layers=[common],
        cache=cache,
        overrides={"X": "cli"},
        toolchain=BUILTIN_TOOLCHAINS["arm-none-eabi"],
    )

    assert context.variables["X"] == "cli"
    assert context.variables["Y"] == "cache"
    assert context.variables["CMAKE_C_COMPILER"] == "arm-none-eabi-gcc"
    assert context.layers == ("cache", "common", "command-line", "toolchain:arm-none-eabi")


def test_context_detects_compiler_and_build_type() -> None:
    common = VariableLayer(
        "common", COMMON_RANK, {"CMAKE_BUILD_TYPE": "Debug", "CMAKE_CXX_COMPILER": "/usr/bin/clang++"}
    )

    context = BuildContext.create(layers=[common])

    assert context.build_mode is BuildMode.DEBUG
    assert context.compiler_id == "Clang"
    assert context.compiler_family is CompilerFamily.CLANG


def test_explicit_arguments_win() -> None:
    common = VariableLayer(
        "common", COMMON_RANK, {"CMAKE_BUILD_TYPE": "Debug", "CMAKE_CXX_COMPILER_ID": "GNU"}
    )

    context = BuildContext.create(layers=[common], build_type="Release", compiler_id="MSVC")

    assert context.build_mode is BuildMode.RELEASE
    assert context.variables["CMAKE_BUILD_TYPE"] == "Release"
    assert context.compiler_family is CompilerFamily.MSVC


def test_context_is_frozen() -> None:
    context = BuildContext.create()

    with pytest.raises(Exception):
        context.build_type = "Debug"  # type: ignore[misc]


def test_context_variables_are_read_only() -> None:
    context = BuildContext.create(overrides={"X": "1"})

    with pytest.raises(TypeError):
        context.variables["X"] = "2"  # type: ignore[index]
    assert context.get("X") == "1"


def _config(**build) -> ProjectConfig:
    return ProjectConfig.from_dict(
        {
            "project": {"name": "demo"},
            "build": build,
            "targets": [{"name": "demo_app"}, {"name": "demo_lib", "functions": ["configure_preprocessor_definitions"]}],
        }
    )


def test_configure_dev_with_gnu(tmp_path: Path) -> None:
    result = configure_project(_config(environment="dev", compiler_id="GNU"), base_dir=tmp_path)

    app = result.targets["demo_app"]
    lib = result.targets["demo_lib"]
    assert result.version.version == "1.0.0"
    assert result.context.variables["demo_VERSION"] == "1.0.0"
    assert result.context.build_mode is BuildMode.DEBUG
    assert "-Wall" in app.compile_options
    assert "--coverage" in app.link_options
    assert app.compile_definitions == ["DEBUG_BUILD", "DEV_ENVIRONMENT", "ENABLE_LOGGING"]
    assert lib.compile_options == []
    assert lib.compile_definitions == ["DEBUG_BUILD", "DEV_ENVIRONMENT", "ENABLE_LOGGING"]
    assert len(result.results_for("demo_app")) == 3


def test_configure_prod_with_toolchain(tmp_path: Path) -> None:
    result = configure_project(
        _config(environment="prod", toolchain="arm-none-eabi"), base_dir=tmp_path
    )

    app = result.targets["demo_app"]
    assert result.context.compiler_id == "GNU"
    assert result.context.build_mode is BuildMode.RELEASE
    assert "--coverage" not in app.compile_options
    assert app.compile_definitions == ["RELEASE_BUILD", "PROD_ENVIRONMENT", "NDEBUG"]
    coverage = [r for r in result.results_for("demo_app") if r.function == "enable_code_coverage"]
    assert coverage[0].outcome is ApplyOutcome.SKIPPED_NOT_APPLICABLE


def test_configure_unknown_compiler_is_surfaced(tmp_path: Path) -> None:
    result = configure_project(_config(environment="dev"), base_dir=tmp_path)

    outcomes = {r.function: r.outcome for r in result.results_for("demo_app")}
    assert outcomes["add_compiler_warnings"] is ApplyOutcome.SKIPPED_UNSUPPORTED
    assert outcomes["configure_preprocessor_definitions"] is ApplyOutcome.APPLIED


def test_configure_custom_env_dir_and_definitions(tmp_path: Path) -> None:
    env_dir = tmp_path / "env"
    env_dir.mkdir()
    (env_dir / "common.toml").write_text('X = "1"\nCMAKE_BUILD_TYPE = "Release"\n', encoding="utf-8")
    (env_dir / "ci.toml").write_text('X = "2"\n', encoding="utf-8")

    result = configure_project(
        _config(env_dir="env", environment="ci", definitions={"Y": "3"}), base_dir=tmp_path
    )

    assert result.context.variables["X"] == "2"
    assert result.context.variables["Y"] == "3"
    assert result.context.layers[-2:] == ("ci", "command-line")


def test_definitions_reach_the_cache(tmp_path: Path) -> None:
    result = configure_project(
        _config(compiler_id="GNU", definitions={"VERSION_MAJOR": "3"}), base_dir=tmp_path
    )

    assert result.cache.get("VERSION_MAJOR") == "3"
    assert result.version.version == "3.0.0"
    assert result.context.variables["demo_VERSION"] == "3.0.0"
    assert result.context.variables["VERSION_MAJOR"] == "3"


def test_definitions_win_over_config_cache(tmp_path: Path) -> None:
    config = ProjectConfig.from_dict(
        {
            "project": {"name": "demo"},
            "build": {"definitions": {"VERSION_MINOR": "7"}},
            "cache": {"VERSION_MAJOR": "2", "VERSION_MINOR": "1"},
        }
    )

    result = configure_project(config, base_dir=tmp_path)

    assert result.version.version == "2.7.0"


def test_configure_missing_common(tmp_path: Path) -> None:
    (tmp_path / "env").mkdir()

    with pytest.raises(LayerNotFoundError):
        configure_project(_config(env_dir="env"), base_dir=tmp_path)


def test_config_loader_file_and_inline(tmp_path: Path) -> None:
    path = tmp_path / "cmakebase.toml"
    path.write_text(
        '[project]\nname = "demo"\n[cache]\nVERSION_MAJOR = 3\n[[targets]]\nname = "app"\n',
        encoding="utf-8",
    )

    from_file = load_project_config(path)
    inline = load_project_config('{"project": {"name": "demo"}}')

    assert from_file.cache == {"VERSION_MAJOR": "3"}
    assert from_file.targets[0].functions == [
        "add_compiler_warnings",
        "enable_code_coverage",
        "configure_preprocessor_definitions",
    ]
    assert inline.project.name == "demo"


@pytest.mark.parametrize(
    "data",
    [
        {"project": {"name": ""}},
        {"project": {"name": "demo"}, "targets": [{"name": "a", "functions": ["nope"]}]},
        {"project": {"name": "demo"}, "targets": [{"name": "a"}, {"name": "a"}]},
        {"project": {"name": "demo"}, "build": {"unknown": 1}},
    ],
)
def test_invalid_configs_are_rejected(data) -> None:
    with pytest.raises(ConfigurationError):
        load_project_config(data)
