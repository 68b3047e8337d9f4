"""Unit tests for core/session.py and core/lsp.py"""

import pytest

from mdctx.config import Settings
from mdctx.core.lsp import EglotLikeClient, LspModeLikeClient, LspStrategy, make_client
from mdctx.core.session import EditSession, ensure_directory, target_abspath
from mdctx.errors import DirectoryMissingError, SessionError


@pytest.fixture(name="nested")
def nested_fixture(make_block):
    """Two blocks tangled into sub/dir/out.py; the second asks for mkdirp."""
    return [
        make_block("A", "a = 0\n", "sub/dir/out.py"),
        make_block("B", "b = 1\n", "sub/dir/out.py", header_args={"mkdirp": "YES"}),
    ]


def test_ensure_directory_missing_without_directive(tmp_path):
    target = tmp_path / "sub" / "dir"
    with pytest.raises(DirectoryMissingError) as exc:
        ensure_directory(target, None)
    assert exc.value.directory == target
    assert not target.exists()


@pytest.mark.parametrize("directive", ["yes", "YES", "Yes"])
def test_ensure_directory_creates_with_yes(tmp_path, directive):
    target = tmp_path / "sub" / "dir"
    assert ensure_directory(target, directive)
    assert target.is_dir()


def test_ensure_directory_rejects_other_directives(tmp_path):
    with pytest.raises(DirectoryMissingError):
        ensure_directory(tmp_path / "sub", "no")


def test_ensure_directory_existing(tmp_path):
    assert ensure_directory(tmp_path, None) is False


def test_target_abspath(tmp_path):
    assert target_abspath("sub/out.py", tmp_path) == tmp_path / "sub" / "out.py"
    assert target_abspath(str(tmp_path / "abs.py"), tmp_path / "ignored") == tmp_path / "abs.py"


def test_enter_splices_and_attaches(nested, tmp_path):
    client = EglotLikeClient()
    session = EditSession(nested[1], nested, Settings(), client=client, doc_dir=tmp_path)
    buffer = session.enter()
    expected = tmp_path / "sub" / "dir" / "out.py"

    assert session.spliced
    assert buffer.text == "a = 0\n\nb = 1\n"
    assert session.file_path == expected
    assert buffer.file_path == expected
    assert expected.parent.is_dir()
    assert client.attached == {expected}


def test_enter_directory_missing_keeps_buffer_spliced(nested, tmp_path):
    """Without mkdirp the connector fails but the spliced buffer survives and exits cleanly."""
    session = EditSession(nested[0], nested, Settings(), client=LspModeLikeClient(), doc_dir=tmp_path)
    with pytest.raises(DirectoryMissingError):
        session.enter()
    assert session.spliced
    assert session.buffer.text == "a = 0\n\nb = 1\n"
    assert session.exit() == "a = 0\n"


def test_enter_uses_staging_dir(nested, tmp_path):
    staging = tmp_path / "staging"
    session = EditSession(nested[1], nested, Settings(staging_dir=str(staging)), client=EglotLikeClient())
    session.enter()
    assert session.file_path == staging / "sub" / "dir" / "out.py"


def test_enter_without_context_skips_connect(make_block, tmp_path):
    only = make_block("A", "a = 0\n", "single.py")
    client = EglotLikeClient()
    session = EditSession(only, [only], Settings(), client=client, doc_dir=tmp_path)
    buffer = session.enter()
    assert not session.spliced
    assert buffer.text == "a = 0\n"
    assert session.file_path is None
    assert client.attached == set()


def test_enter_narrow_setting(nested, tmp_path):
    session = EditSession(nested[1], nested, Settings(narrow=True), client=EglotLikeClient(), doc_dir=tmp_path)
    buffer = session.enter()
    assert buffer.visible_text == "b = 1\n"


def test_enter_twice_raises(nested, tmp_path):
    session = EditSession(nested[1], nested, client=EglotLikeClient(), doc_dir=tmp_path)
    session.enter(connect=False)
    with pytest.raises(SessionError):
        session.enter()


def test_exit_without_enter_returns_block_text(nested):
    assert EditSession(nested[0], nested).exit() == "a = 0\n"


def test_replace_text_then_exit(nested, tmp_path):
    session = EditSession(nested[1], nested, client=EglotLikeClient(), doc_dir=tmp_path)
    session.enter(connect=False)
    session.replace_text("b = 2\nc = 3\n")
    assert session.editable_text == "b = 2\nc = 3\n"
    assert session.buffer.text == "a = 0\n\nb = 2\nc = 3\n"
    assert session.exit() == "b = 2\nc = 3\n"


def test_replace_text_requires_enter(nested):
    with pytest.raises(SessionError):
        EditSession(nested[0], nested).replace_text("x")


# --- language clients ---

def test_eglot_client_one_session_per_directory(tmp_path):
    started = []
    client = EglotLikeClient(start=started.append)
    assert client.attach(tmp_path / "a.py")
    assert client.attach(tmp_path / "b.py")
    assert not client.attach(tmp_path / "a.py")
    assert started == [tmp_path / "a.py"]
    assert client.sessions() == [tmp_path]


def test_lsp_mode_client_one_registration_per_file(tmp_path):
    started = []
    client = LspModeLikeClient(start=started.append)
    client.attach(tmp_path / "a.py")
    client.attach(tmp_path / "b.py")
    client.attach(tmp_path / "a.py")
    assert started == [tmp_path / "a.py", tmp_path / "b.py"]
    assert client.attached == {tmp_path / "a.py", tmp_path / "b.py"}


def test_make_client():
    assert isinstance(make_client(LspStrategy.eglot), EglotLikeClient)
    assert isinstance(make_client("lsp-mode"), LspModeLikeClient)
    with pytest.raises(ValueError):
        make_client("vim-lsp")
