"""Shared fixtures for timedivision tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from timedivision.config import Config
from timedivision.document import HostDocument
from timedivision.schema import HostSchema


def _block_html(fields: list[str] | None, participants: list[tuple[str, str]]) -> str:
    if fields is None:
        header = '<div class="block-header"><span class="title">No length</span></div>'
    else:
        bolds = " ".join(f"<b>{f}</b>" for f in fields)
        header = (
            '<div class="block-header">'
            f'<div class="FuzzyDurationTimeInput"><span>{bolds}</span></div>'
            "</div>"
        )
    users = "".join(
        f'<span class="user user-inline"><img alt="{name}" src="{avatar}"></span>'
        for name, avatar in participants
    )
    return (
        '<div class="session-block">'
        f"{header}\n"
        f'<div class="block-users">{users}'
        '<span class="user-edit"><a role="button" href="#"><i class="fa-plus"></i></a></span>'
        "</div></div>"
    )


def build_page(
    blocks: list[tuple[list[str] | None, list[tuple[str, str]]]],
    *,
    timer: str = "1h 30min",
    with_root: bool = True,
    with_anchor: bool = True,
) -> str:
    body = [f'<div id="react-header-left"><span class="timer">{timer}</span></div>']
    if with_root:
        body.append('<div id="main-panel">' + "".join(_block_html(f, p) for f, p in blocks) + "</div>")
    if with_anchor:
        body.append(
            '<div id="vertical-tabs-tabpane-info">'
            '<div class="info"><h2>Session info</h2><p>Details</p></div>'
            "</div>"
        )
    return "<html><body>" + "".join(body) + "</body></html>"


@pytest.fixture
def make_page():
    return build_page


@pytest.fixture
def example_blocks() -> list:
    return [
        (["1", "0"], [("Alice", "https://img/alice.png"), ("Bob", "https://img/bob.png")]),
        (["30"], [("Alice", "https://img/alice.png")]),
    ]


@pytest.fixture
def example_document(example_blocks) -> HostDocument:
    return HostDocument.from_html(build_page(example_blocks))


@pytest.fixture
def schema() -> HostSchema:
    return HostSchema()


@pytest.fixture
def document_file(tmp_path: Path, example_blocks) -> Path:
    path = tmp_path / "agenda" / "agenda.html"
    path.parent.mkdir(parents=True)
    path.write_text(build_page(example_blocks), encoding="utf-8")
    return path


@pytest.fixture
def sample_config(document_file: Path) -> Config:
    return Config(document_path=document_file)
