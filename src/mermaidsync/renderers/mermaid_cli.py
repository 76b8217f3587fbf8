"""Mermaid renderer backed by the Mermaid CLI (``mmdc``).

Runs ``mmdc`` as an asyncio subprocess so the event loop keeps serving scans
while a diagram renders. Options received through ``initialize`` are written
to a Mermaid JSON config file passed with ``-c``.

Results are memoized per identifier: re-rendering an identifier with the
source it last rendered returns the stored SVG without spawning ``mmdc``.

Example:
    renderer = MermaidCliRenderer(theme="dark")
    engine = DiagramEngine(
        renderer,
        EngineConfig(container_classes="mermaid", renderer_options={"fontSize": 14}),
    )

"""

from __future__ import annotations

import asyncio
import json
import shutil
import tempfile
from collections import OrderedDict
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from mermaidsync.errors import RenderError
from mermaidsync.renderers.protocol import RenderResult
from mermaidsync.utils.logger import get_logger

logger = get_logger(__name__)

MERMAID_CLI_NAMES: tuple[str, ...] = ("mmdc",)
MERMAID_CLI_HINT_PATHS: tuple[Path, ...] = (
    Path("node_modules/.bin/mmdc"),
    Path("/snap/bin/mmdc"),
)


def resolve_cli(
    names: Sequence[str] = MERMAID_CLI_NAMES,
    hints: Sequence[Path] = MERMAID_CLI_HINT_PATHS,
) -> str | None:
    """Return the path of the first executable found on $PATH or in ``hints``."""
    for name in names:
        resolved = shutil.which(name)
        if resolved:
            return resolved
    for candidate in hints:
        if candidate.exists():
            return str(candidate)
    return None


def _extract_error_details(stderr_text: str) -> str:
    """Reduce mmdc stderr to the lines worth showing in a container."""
    raw = (stderr_text or "").replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.strip() for line in raw.split("\n") if line.strip()]
    if not lines:
        return "unknown error"

    # Mermaid parse failures start with "Error: Parse error on line N:" and
    # are followed by the offending excerpt, then a Node stack trace.
    for index, line in enumerate(lines):
        if line.startswith("Error:"):
            detail = [line.removeprefix("Error:").strip()]
            for follow in lines[index + 1 : index + 4]:
                if follow.startswith("at "):
                    break
                detail.append(follow)
            return "\n".join(detail)

    return "\n".join(lines[:8])


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        proc.kill()
    await proc.wait()


class MermaidCliRenderer:
    """``DiagramRenderer`` that shells out to the Mermaid CLI.

    Args:
        executable: Path to ``mmdc``; discovered on first use when omitted.
        theme: Mermaid theme passed with ``-t``.
        background: Background color passed with ``-b``.
        extra_args: Additional command-line arguments.
        timeout: Seconds before a render is killed (None waits forever).
        cache_size: Maximum identifiers whose last result is memoized.

    Raises:
        ValueError: If ``cache_size`` is negative.

    """

    def __init__(
        self,
        executable: str | None = None,
        *,
        theme: str | None = None,
        background: str | None = None,
        extra_args: Sequence[str] = (),
        timeout: float | None = None,
        cache_size: int = 128,
    ) -> None:
        self._executable = executable
        self.theme = theme
        self.background = background
        self.extra_args = tuple(extra_args)
        self.timeout = timeout
        if cache_size < 0:
            msg = f"cache_size must be >= 0, got {cache_size}"
            raise ValueError(msg)
        self.cache_size = cache_size
        self._config: dict[str, Any] = {}
        self._results: OrderedDict[str, tuple[str, RenderResult]] = OrderedDict()

    def initialize(self, options: Mapping[str, Any]) -> None:
        """Store Mermaid configuration for subsequent renders."""
        self._config = dict(options)
        self._results.clear()

    @property
    def config(self) -> dict[str, Any]:
        return dict(self._config)

    @property
    def executable(self) -> str:
        if self._executable is None:
            self._executable = resolve_cli()
        if self._executable is None:
            raise RenderError(
                "Mermaid CLI not found",
                details="install @mermaid-js/mermaid-cli and make 'mmdc' available on PATH",
            )
        return self._executable

    async def render(self, identifier: str, source: str) -> RenderResult:
        cached = self._results.get(identifier)
        if cached is not None and cached[0] == source:
            self._results.move_to_end(identifier)
            return cached[1]

        try:
            svg = await self._run(source)
        except RenderError as exc:
            exc.identifier = identifier
            raise
        result = RenderResult(svg=svg)
        self._remember(identifier, source, result)
        return result

    def command(self, input_path: Path, output_path: Path, config_path: Path) -> list[str]:
        """Build the ``mmdc`` command line."""
        args = [
            self.executable,
            "-i",
            str(input_path),
            "-o",
            str(output_path),
            "-c",
            str(config_path),
            "-q",
        ]
        if self.theme:
            args.extend(["-t", self.theme])
        if self.background:
            args.extend(["-b", self.background])
        args.extend(self.extra_args)
        return args

    async def _run(self, source: str) -> str:
        with tempfile.TemporaryDirectory(prefix="mermaidsync-") as tmp:
            work_dir = Path(tmp)
            input_path = work_dir / "diagram.mmd"
            output_path = work_dir / "diagram.svg"
            config_path = work_dir / "mermaid-config.json"
            input_path.write_text(source, encoding="utf-8")
            config_path.write_text(json.dumps(self._config), encoding="utf-8")

            args = self.command(input_path, output_path, config_path)
            logger.debug("Running %s", " ".join(args))
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                _, stderr = await asyncio.wait_for(proc.communicate(), self.timeout)
            except TimeoutError as exc:
                await _kill(proc)
                raise RenderError(
                    "Mermaid CLI timed out", details=f"no output after {self.timeout}s"
                ) from exc
            except BaseException:
                # Cancelled: reap the child before its working directory goes away
                await _kill(proc)
                raise

            if proc.returncode != 0:
                raise RenderError(
                    f"Mermaid CLI exited with status {proc.returncode}",
                    details=_extract_error_details(stderr.decode("utf-8", errors="replace")),
                )
            if not output_path.exists():
                raise RenderError("Mermaid CLI did not produce an SVG file")
            return output_path.read_text(encoding="utf-8")

    def _remember(self, identifier: str, source: str, result: RenderResult) -> None:
        self._results[identifier] = (source, result)
        self._results.move_to_end(identifier)
        while len(self._results) > self.cache_size:
            self._results.popitem(last=False)


__all__ = [
    "MERMAID_CLI_HINT_PATHS",
    "MERMAID_CLI_NAMES",
    "MermaidCliRenderer",
    "resolve_cli",
]
