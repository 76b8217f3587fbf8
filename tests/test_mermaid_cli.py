"""Tests for the Mermaid CLI renderer.

A fake ``mmdc`` shell script stands in for the real CLI so the tests run
without Node.js.
"""

from __future__ import annotations

import asyncio
import json
import os
import stat
import sys
from pathlib import Path

import pytest

from mermaidsync.errors import RenderError
from mermaidsync.renderers import RenderResult, mermaid_cli
from mermaidsync.renderers.mermaid_cli import (
    MermaidCliRenderer,
    _extract_error_details,
    resolve_cli,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake mmdc is a POSIX shell script")

FAKE_MMDC = """#!/bin/sh
echo "$@" >> "{log}"
echo $$ > "{pid}"
while [ $# -gt 0 ]; do
  case "$1" in
    -i) input="$2"; shift 2 ;;
    -o) output="$2"; shift 2 ;;
    -c) config="$2"; shift 2 ;;
    *) shift ;;
  esac
done
cp "$config" "{seen_config}"
if grep -q FAIL "$input"; then
  echo "Error: Parse error on line 2:" >&2
  echo "graph TD FAIL" >&2
  echo "---------^" >&2
  echo "    at Parser.parseError (mermaid.js:1:1)" >&2
  exit 1
fi
if grep -q NOOUTPUT "$input"; then
  exit 0
fi
if grep -q SLOW "$input"; then
  exec sleep 2
fi
printf '<svg xmlns="http://www.w3.org/2000/svg"><text>%s</text></svg>' "$(head -n 1 "$input")" > "$output"
"""


@pytest.fixture
def fake_mmdc(tmp_path: Path) -> tuple[Path, Path, Path]:
    """Create an executable fake mmdc; return (script, call log, last config)."""
    log = tmp_path / "calls.log"
    seen_config = tmp_path / "config.json"
    script = tmp_path / "mmdc"
    script.write_text(
        FAKE_MMDC.format(log=log, seen_config=seen_config, pid=tmp_path / "mmdc.pid"),
        encoding="utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script, log, seen_config


def _calls(log: Path) -> int:
    return len(log.read_text().splitlines()) if log.exists() else 0


class TestExtractErrorDetails:
    """stderr reduction."""

    def test_parse_error_excerpt_without_stack(self) -> None:
        stderr = (
            "\nError: Parse error on line 2:\n"
            "graph TD\nA -->\n"
            "-----^\n"
            "    at Parser.parseError (file.js:1:1)\n"
            "    at Object.parse (file.js:2:2)\n"
        )
        assert _extract_error_details(stderr) == "Parse error on line 2:\ngraph TD\nA -->\n-----^"

    def test_stack_ends_excerpt_early(self) -> None:
        stderr = "Error: boom\n at somewhere\nmore"
        assert _extract_error_details(stderr) == "boom"

    def test_no_error_line_keeps_head(self) -> None:
        stderr = "\n".join(f"line {n}" for n in range(20))
        assert _extract_error_details(stderr) == "\n".join(f"line {n}" for n in range(8))

    def test_empty(self) -> None:
        assert _extract_error_details("") == "unknown error"
        assert _extract_error_details("\r\n  \r\n") == "unknown error"


class TestResolveCli:
    """Executable discovery."""

    def test_found_on_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(mermaid_cli.shutil, "which", lambda name: f"/usr/bin/{name}")
        assert resolve_cli() == "/usr/bin/mmdc"

    def test_falls_back_to_hint_paths(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        hint = tmp_path / "node_modules" / ".bin" / "mmdc"
        hint.parent.mkdir(parents=True)
        hint.touch()
        monkeypatch.setattr(mermaid_cli.shutil, "which", lambda name: None)
        assert resolve_cli(hints=(tmp_path / "missing", hint)) == str(hint)

    def test_not_found(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(mermaid_cli.shutil, "which", lambda name: None)
        assert resolve_cli(hints=(tmp_path / "missing",)) is None

    def test_missing_cli_is_a_render_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(mermaid_cli, "resolve_cli", lambda: None)
        renderer = MermaidCliRenderer()
        with pytest.raises(RenderError, match="Mermaid CLI not found"):
            asyncio.run(renderer.render("d1", "graph TD"))


class TestCommand:
    """Command-line construction."""

    def test_minimal(self, tmp_path: Path) -> None:
        renderer = MermaidCliRenderer("/opt/mmdc")
        args = renderer.command(tmp_path / "in.mmd", tmp_path / "out.svg", tmp_path / "c.json")
        assert args == [
            "/opt/mmdc",
            "-i",
            str(tmp_path / "in.mmd"),
            "-o",
            str(tmp_path / "out.svg"),
            "-c",
            str(tmp_path / "c.json"),
            "-q",
        ]

    def test_theme_background_and_extra_args(self, tmp_path: Path) -> None:
        renderer = MermaidCliRenderer(
            "/opt/mmdc", theme="dark", background="transparent", extra_args=["-p", "puppeteer.json"]
        )
        args = renderer.command(tmp_path / "i", tmp_path / "o", tmp_path / "c")
        assert args[-6:] == ["-t", "dark", "-b", "transparent", "-p", "puppeteer.json"]

    def test_negative_cache_size_rejected(self) -> None:
        with pytest.raises(ValueError, match="cache_size"):
            MermaidCliRenderer("/opt/mmdc", cache_size=-1)

    def test_zero_cache_size_disables_memo(self) -> None:
        renderer = MermaidCliRenderer("/opt/mmdc", cache_size=0)
        renderer._remember("d1", "graph TD", RenderResult(svg="<svg/>"))
        assert renderer._results == {}

    def test_initialize_stores_copy(self) -> None:
        renderer = MermaidCliRenderer("/opt/mmdc")
        options = {"theme": "forest"}
        renderer.initialize(options)
        options["theme"] = "dark"
        assert renderer.config == {"theme": "forest"}


@posix_only
class TestRender:
    """Rendering through the fake CLI."""

    def test_renders_svg(self, fake_mmdc) -> None:
        script, log, seen_config = fake_mmdc
        renderer = MermaidCliRenderer(str(script))
        renderer.initialize({"startOnLoad": False, "theme": "neutral"})

        result = asyncio.run(renderer.render("d1", "graph TD\nA --> B"))

        assert result.svg.startswith("<svg")
        assert "<text>graph TD</text>" in result.svg
        assert json.loads(seen_config.read_text()) == {"startOnLoad": False, "theme": "neutral"}
        assert _calls(log) == 1

    def test_memoized_per_identifier(self, fake_mmdc) -> None:
        script, log, _ = fake_mmdc
        renderer = MermaidCliRenderer(str(script))

        async def run() -> None:
            first = await renderer.render("d1", "graph TD")
            assert await renderer.render("d1", "graph TD") is first
            await renderer.render("d2", "graph TD")
            await renderer.render("d1", "graph LR")

        asyncio.run(run())
        assert _calls(log) == 3

    def test_cache_size_bound(self, fake_mmdc) -> None:
        script, log, _ = fake_mmdc
        renderer = MermaidCliRenderer(str(script), cache_size=1)

        async def run() -> None:
            await renderer.render("a", "graph TD")
            await renderer.render("b", "graph TD")
            await renderer.render("a", "graph TD")

        asyncio.run(run())
        assert _calls(log) == 3

    def test_initialize_clears_memo(self, fake_mmdc) -> None:
        script, log, _ = fake_mmdc
        renderer = MermaidCliRenderer(str(script))

        async def run() -> None:
            await renderer.render("d1", "graph TD")
            renderer.initialize({"theme": "dark"})
            await renderer.render("d1", "graph TD")

        asyncio.run(run())
        assert _calls(log) == 2

    def test_nonzero_exit(self, fake_mmdc) -> None:
        script, _, _ = fake_mmdc
        renderer = MermaidCliRenderer(str(script))

        with pytest.raises(RenderError) as exc_info:
            asyncio.run(renderer.render("d1", "graph TD FAIL"))

        err = exc_info.value
        assert err.message == "Mermaid CLI exited with status 1"
        assert err.identifier == "d1"
        assert err.details == "Parse error on line 2:\ngraph TD FAIL\n---------^"

    def test_failure_is_not_memoized(self, fake_mmdc) -> None:
        script, log, _ = fake_mmdc
        renderer = MermaidCliRenderer(str(script))

        async def run() -> None:
            for _ in range(2):
                with pytest.raises(RenderError):
                    await renderer.render("d1", "FAIL")

        asyncio.run(run())
        assert _calls(log) == 2

    def test_missing_output(self, fake_mmdc) -> None:
        script, _, _ = fake_mmdc
        with pytest.raises(RenderError, match="did not produce"):
            asyncio.run(MermaidCliRenderer(str(script)).render("d1", "NOOUTPUT"))

    def test_timeout(self, fake_mmdc) -> None:
        script, _, _ = fake_mmdc
        renderer = MermaidCliRenderer(str(script), timeout=0.2)
        with pytest.raises(RenderError, match="timed out"):
            asyncio.run(renderer.render("d1", "SLOW"))

    def test_cancelled_render_kills_cli(self, fake_mmdc, tmp_path: Path) -> None:
        script, _, _ = fake_mmdc
        pid_file = tmp_path / "mmdc.pid"
        renderer = MermaidCliRenderer(str(script))

        async def run() -> None:
            task = asyncio.create_task(renderer.render("d1", "SLOW"))
            for _ in range(100):
                if pid_file.exists() and pid_file.read_text().strip():
                    break
                await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())
        pid = int(pid_file.read_text())
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)

    def test_engine_integration(self, fake_mmdc) -> None:
        from mermaidsync import DiagramEngine, code_block, document

        script, _, seen_config = fake_mmdc

        async def run():
            engine = DiagramEngine(
                MermaidCliRenderer(str(script)),
                container_classes="mermaid",
                debounce_ms=0,
                mermaidConfig={"theme": "dark", "startOnLoad": True},
            )
            ok, bad = engine.reconcile(
                document(
                    code_block("graph TD\nA --> B", language="mermaid", id="ok"),
                    code_block("graph TD FAIL", language="mermaid", id="bad"),
                )
            )
            await engine.wait_idle()
            return ok.container, bad.container

        ok, bad = asyncio.run(run())
        assert ok.children and not ok.has_class("error")
        assert bad.text.startswith("Mermaid render error: Mermaid CLI exited with status 1")
        assert bad.has_class("error")
        config = json.loads(seen_config.read_text())
        assert config["startOnLoad"] is False
        assert config["suppressErrorRendering"] is True
        assert config["theme"] == "dark"
