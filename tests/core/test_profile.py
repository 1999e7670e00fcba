import pytest

from kyusu.config import ArchiveConfig
from kyusu.core.container import ZipArchive
from kyusu.core.profile import avatar_path, load_data_object, load_user
from kyusu.errors import ArchiveError, ErrorKind
from kyusu.media.entries import LazyMedia

from conftest import ACCOUNT_ID, AVATAR_BYTES, build_archive, make_data_file


def test_avatar_path_uses_account_prefix():
    path = avatar_path(ArchiveConfig(), "42", "https://pbs.twimg.com/profile_images/9/me.jpg?x=1")
    assert path == "data/profile_media/42-me.jpg"


@pytest.mark.asyncio
async def test_load_user(archive_bytes):
    warnings = []
    async with await ZipArchive.open(archive_bytes) as archive:
        user = await load_user(archive, ArchiveConfig(), warnings)
    assert warnings == []
    assert user.account_id == ACCOUNT_ID
    assert user.account["accountDisplayName"] == "Test User"
    assert user.avatar.data.data == AVATAR_BYTES
    assert user.to_dict()["profile"]["avatar"]["filename"] == f"{ACCOUNT_ID}-avatar.png"


@pytest.mark.asyncio
async def test_lazy_avatar(archive_bytes):
    async with await ZipArchive.open(archive_bytes) as archive:
        user = await load_user(archive, ArchiveConfig(), [], lazy=True)
        assert isinstance(user.avatar, LazyMedia)
        assert (await user.avatar.read()).data == AVATAR_BYTES


@pytest.mark.asyncio
async def test_missing_avatar_is_a_warning(archive_files):
    del archive_files[f"data/profile_media/{ACCOUNT_ID}-avatar.png"]
    warnings = []
    async with await ZipArchive.open(build_archive(archive_files)) as archive:
        user = await load_user(archive, ArchiveConfig(), warnings)
    assert user.avatar is None
    assert [w.kind for w in warnings] == [ErrorKind.MISSING_OPTIONAL_FILE]
    assert "Avatar not found in ZIP" in warnings[0].message


@pytest.mark.asyncio
async def test_first_record_of_multi_record_file():
    text = make_data_file("account", "account", [{"accountId": "1"}, {"accountId": "2"}])
    async with await ZipArchive.open(build_archive({"data/account.js": text})) as archive:
        assert await load_data_object(archive, "data/account.js", []) == {"accountId": "1"}


@pytest.mark.asyncio
async def test_malformed_account_file_raises():
    data = build_archive({"data/account.js": "window.YTD.account.part0 = [\nnot json\n]"})
    async with await ZipArchive.open(data) as archive:
        with pytest.raises(ArchiveError) as exc_info:
            await load_data_object(archive, "data/account.js", [])
    assert exc_info.value.kind is ErrorKind.FORMAT_REPAIR


@pytest.mark.asyncio
@pytest.mark.parametrize("records", [[None], ["text", {"accountId": "1"}]])
async def test_non_object_record_is_a_format_error(records):
    data = build_archive({"data/account.js": make_data_file("account", "account", records)})
    async with await ZipArchive.open(data) as archive:
        with pytest.raises(ArchiveError) as exc_info:
            await load_user(archive, ArchiveConfig(), [])
    assert exc_info.value.kind is ErrorKind.FORMAT_REPAIR
    assert exc_info.value.file_name == "data/account.js"
    assert "expected an object" in str(exc_info.value)
