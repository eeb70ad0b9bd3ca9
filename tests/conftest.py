"""Shared pytest fixtures for repo-level integration tests.

Provides a content directory populated with a dual-leg call (two audio
files and their transcripts) and the matching document list.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cs_common.models import DocumentInfo

PRIMARY = """Call ID: 98765
------------------------------

[14:02:00     Virtual Agent]     Thanks for calling, how can I help?
[14:02:06     Customer]     My card was declined.
this line is noise and must be skipped
[14:02:13     Virtual Agent]     Let me connect you with an agent.
"""

SECONDARY = """Call ID: 98765
------------------------------

[14:03:30     Agent Lee]     Hi, this is Lee. I see the declined charge.
[99:99:99     Agent Lee]     corrupted line
[14:03:41     Customer]     Can you fix it?
[14:03:52     Agent Lee]     Done, please try again.
"""


@pytest.fixture()
def content_dir(tmp_path: Path) -> Path:
    (tmp_path / "va-98765").write_text(PRIMARY, encoding="utf-8")
    (tmp_path / "rt-98765").write_text(SECONDARY, encoding="utf-8")
    (tmp_path / "aud-1").write_bytes(b"ID3\x03primary")
    (tmp_path / "aud-2").write_bytes(b"ID3\x03secondary")
    return tmp_path


@pytest.fixture()
def call_documents() -> list[DocumentInfo]:
    return [
        DocumentInfo(document_id="aud-2", title="case_98765_2.mp3", file_type="MP3"),
        DocumentInfo(document_id="aud-1", title="case_98765.mp3", file_type="MP3"),
        DocumentInfo(
            document_id="va-98765",
            title="va_transcript_98765.txt",
            file_type="TXT",
            download_url="https://files.example/va-98765",
        ),
        DocumentInfo(
            document_id="rt-98765",
            title="rt_transcript_98765.txt",
            file_type="TXT",
            download_url="https://files.example/rt-98765",
        ),
    ]
