from __future__ import annotations

import io

import pytest
from starlette.datastructures import UploadFile

from intake.schemas.ingestion import IngestionConfig
from intake.services.uploads import (
    FileTypeNotPermitted,
    NoFileUploaded,
    SpooledFilePart,
    TooManyFiles,
    UploadDirectoryError,
    UploadReadError,
    UploadWriteError,
    store_one,
    store_parts,
)
from intake.services.uploads.naming import RANDOM_NAME_LENGTH, original_extension
from intake.services.uploads.sniff import is_allowed, sniff_content_type
from intake.services.utils import RANDOM_STRING_ALPHABET


def _part(data: bytes, filename: str) -> SpooledFilePart:
    return SpooledFilePart(UploadFile(io.BytesIO(data), filename=filename))


class BrokenPart:
    filename = "broken.png"

    def open(self):
        raise OSError("stream vanished")


IMAGES_ONLY = IngestionConfig(allowed_content_types=frozenset({"image/png", "image/gif"}))


def test_sniff_detects_real_types(samples):
    assert sniff_content_type(samples.png) == "image/png"
    assert sniff_content_type(samples.gif) == "image/gif"
    assert sniff_content_type(samples.text) == "text/plain"


def test_is_allowed_rules():
    assert is_allowed("text/plain", [])
    assert is_allowed("image/png", ["IMAGE/PNG"])
    assert is_allowed("text/plain; charset=utf-8", ["text/plain"])
    assert not is_allowed("text/plain", ["image/png"])


def test_original_extension():
    assert original_extension("photo.final.PNG") == ".PNG"
    assert original_extension("../../etc/passwd") == ""
    assert original_extension("C:\\Users\\me\\scan.gif") == ".gif"
    assert original_extension("") == ""


def test_store_allowed_file(tmp_path, samples):
    outcome = store_parts([_part(samples.png, "pixel.png")], tmp_path, IMAGES_ONLY)

    assert outcome.ok
    (record,) = outcome.records
    assert record.original_name == "pixel.png"
    assert record.byte_count == len(samples.png)
    assert record.content_type == "image/png"
    assert record.assigned_name.endswith(".png")
    assert len(record.assigned_name) == RANDOM_NAME_LENGTH + len(".png")
    assert set(record.assigned_name[:RANDOM_NAME_LENGTH]) <= set(RANDOM_STRING_ALPHABET)
    assert (tmp_path / record.assigned_name).read_bytes() == samples.png


def test_sniff_read_is_not_lost_from_stored_copy(tmp_path, samples):
    data = samples.text * 50
    assert len(data) > 512

    outcome = store_parts([_part(data, "notes.txt")], tmp_path, IngestionConfig())

    (record,) = outcome.records
    assert record.byte_count == len(data)
    assert (tmp_path / record.assigned_name).read_bytes() == data


def test_rejected_first_part_returns_no_records(tmp_path, samples):
    outcome = store_parts([_part(samples.text, "notes.txt")], tmp_path, IMAGES_ONLY)

    assert outcome.records == ()
    assert isinstance(outcome.error, FileTypeNotPermitted)
    assert outcome.error.content_type == "text/plain"
    assert str(outcome.error) == "the uploaded file type is not permitted"
    assert list(tmp_path.iterdir()) == []


def test_client_filename_does_not_decide_type(tmp_path, samples):
    outcome = store_parts([_part(samples.text, "definitely-an-image.png")], tmp_path, IMAGES_ONLY)
    assert isinstance(outcome.error, FileTypeNotPermitted)


def test_partial_result_kept_when_later_part_fails(tmp_path, samples):
    parts = [
        _part(samples.png, "first.png"),
        _part(samples.text, "second.txt"),
        _part(samples.gif, "third.gif"),
    ]

    outcome = store_parts(parts, tmp_path, IMAGES_ONLY)

    assert [r.original_name for r in outcome.records] == ["first.png"]
    assert isinstance(outcome.error, FileTypeNotPermitted)
    assert [p.name for p in tmp_path.iterdir()] == [outcome.records[0].assigned_name]


def test_streams_closed_on_every_path(tmp_path, samples):
    accepted = _part(samples.png, "ok.png")
    rejected = _part(samples.text, "no.txt")

    store_parts([accepted, rejected], tmp_path, IMAGES_ONLY)

    assert accepted.upload.file.closed
    assert rejected.upload.file.closed


def test_open_failure_is_terminal_with_partial_records(tmp_path, samples):
    outcome = store_parts([_part(samples.png, "ok.png"), BrokenPart()], tmp_path, IngestionConfig())

    assert len(outcome.records) == 1
    assert isinstance(outcome.error, UploadReadError)
    assert isinstance(outcome.error.__cause__, OSError)


def test_empty_allow_list_accepts_anything(tmp_path, samples):
    parts = [_part(samples.text, "a.txt"), _part(samples.png, "b.png")]
    outcome = store_parts(parts, tmp_path, IngestionConfig())

    assert outcome.ok
    assert [r.content_type for r in outcome.records] == ["text/plain", "image/png"]


def test_renaming_never_repeats_and_keeps_extension(tmp_path, samples):
    parts = [_part(samples.png, "same.png") for _ in range(5)]
    outcome = store_parts(parts, tmp_path, IngestionConfig())

    names = [r.assigned_name for r in outcome.records]
    assert len(set(names)) == 5
    assert all(name.endswith(".png") for name in names)


def test_rename_disabled_keeps_client_name(tmp_path, samples):
    outcome = store_parts([_part(samples.png, "keep-me.png")], tmp_path, IngestionConfig(), rename=False)

    assert outcome.records[0].assigned_name == "keep-me.png"
    assert (tmp_path / "keep-me.png").read_bytes() == samples.png


def test_rename_disabled_refuses_paths_outside_directory(tmp_path, samples):
    target = tmp_path / "uploads"
    outcome = store_parts([_part(samples.png, "../escape.png")], target, IngestionConfig(), rename=False)

    assert outcome.records == ()
    assert isinstance(outcome.error, UploadWriteError)
    assert not (tmp_path / "escape.png").exists()


def test_write_failure_keeps_earlier_records(tmp_path, samples):
    (tmp_path / "taken.png").mkdir()
    parts = [_part(samples.png, "first.png"), _part(samples.png, "taken.png")]

    outcome = store_parts(parts, tmp_path, IngestionConfig(), rename=False)

    assert [r.assigned_name for r in outcome.records] == ["first.png"]
    assert isinstance(outcome.error, UploadWriteError)
    assert isinstance(outcome.error.__cause__, OSError)
    assert (tmp_path / "taken.png").is_dir()


def test_destination_directory_created(tmp_path, samples):
    target = tmp_path / "nested" / "deeper"
    outcome = store_parts([_part(samples.png, "a.png")], target, IngestionConfig())

    assert outcome.ok
    assert target.is_dir()


def test_directory_failure_touches_no_part(tmp_path, samples):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")
    part = _part(samples.png, "a.png")

    outcome = store_parts([part], blocker, IngestionConfig())

    assert outcome.records == ()
    assert isinstance(outcome.error, UploadDirectoryError)
    assert not part.upload.file.closed


def test_config_is_left_untouched(tmp_path, samples):
    config = IngestionConfig()
    store_parts([_part(samples.png, "a.png")], tmp_path, config)

    assert config.max_upload_bytes == 0
    assert config.effective_max_upload_bytes == 1024 * 1024 * 1024


def test_store_one(tmp_path, samples):
    record = store_one([_part(samples.gif, "one.gif")], tmp_path, IMAGES_ONLY)
    assert record.content_type == "image/gif"
    assert record.byte_count == len(samples.gif)


def test_store_one_requires_a_file(tmp_path):
    with pytest.raises(NoFileUploaded):
        store_one([], tmp_path, IngestionConfig())


def test_store_one_rejects_several_files_before_writing(tmp_path, samples):
    parts = [_part(samples.png, "a.png"), _part(samples.png, "b.png")]
    with pytest.raises(TooManyFiles):
        store_one(parts, tmp_path / "out", IngestionConfig())
    assert not (tmp_path / "out").exists()


def test_store_one_raises_pipeline_error(tmp_path, samples):
    with pytest.raises(FileTypeNotPermitted):
        store_one([_part(samples.text, "a.txt")], tmp_path, IMAGES_ONLY)
