import os
from datetime import datetime
from pathlib import Path

import pytest

from tidyfs.core import TidyFSApp
from tidyfs.exceptions import ArgumentError
from tidyfs.models import Category, CategoryKind, FileRecord, PlannedMove
from tidyfs.organization.mover import FileMover, organize
from tidyfs.organization.rules import DestinationPlanner
from tidyfs.scanning.filesystem import DiskScanner


def snapshot(root: Path):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))


def make_record(path, category=Category(CategoryKind.DOCUMENT), last_modified=1_600_000_000):
    return FileRecord(path=Path(path), size=1, last_modified=last_modified, category=category)


@pytest.fixture
def pdf_and_jpg(tmp_path, settings):
    src = tmp_path / "src"
    src.mkdir()
    (src / "report.pdf").write_text("pdf")
    (src / "photo.jpg").write_text("jpg")
    return src, DiskScanner(settings).scan(src).records


def test_organize_by_type(pdf_and_jpg, tmp_path):
    src, records = pdf_and_jpg
    target = tmp_path / "sorted"

    result = organize(records, target, "type")

    assert result.moved == 2
    assert result.errors == 0
    assert (target / "Documents" / "report.pdf").read_text() == "pdf"
    assert (target / "Images" / "photo.jpg").read_text() == "jpg"
    assert sorted(p.name for p in target.iterdir()) == ["Documents", "Images"]
    assert list(src.iterdir()) == []


def test_dry_run_changes_nothing(pdf_and_jpg, tmp_path):
    src, records = pdf_and_jpg
    before = snapshot(tmp_path)

    result = organize(records, src, "type", dry_run=True)

    assert snapshot(tmp_path) == before
    assert result.moved == 0
    assert {m.destination for m in result.planned} == {
        src / "Documents" / "report.pdf",
        src / "Images" / "photo.jpg",
    }


def test_dry_run_reports_collision_renamed_destination(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    incoming = src / "report.pdf"
    incoming.write_text("new")
    other = src / "nested" / "report.pdf"
    other.parent.mkdir()
    other.write_text("newer")
    existing = tmp_path / "out" / "Documents" / "report.pdf"
    existing.parent.mkdir(parents=True)
    existing.write_text("old")
    before = snapshot(tmp_path)

    mover = FileMover(clock=lambda: 1_700_000_000)
    moves = DestinationPlanner(tmp_path / "out", "type").plan_all([make_record(incoming), make_record(other)])
    result = mover.execute(moves, dry_run=True)

    assert snapshot(tmp_path) == before
    assert [m.destination.name for m in result.planned] == ["report_1700000000.pdf", "report_1700000000_1.pdf"]


def test_collision_renames_incoming_file(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    incoming = src / "report.pdf"
    incoming.write_text("new")
    existing = tmp_path / "out" / "Documents" / "report.pdf"
    existing.parent.mkdir(parents=True)
    existing.write_text("old")

    mover = FileMover(clock=lambda: 1_700_000_000)
    moves = DestinationPlanner(tmp_path / "out", "type").plan_all([make_record(incoming)])
    result = mover.execute(moves)

    assert result.moved == 1
    assert existing.read_text() == "old"
    assert (existing.parent / "report_1700000000.pdf").read_text() == "new"
    assert not incoming.exists()


def test_collision_within_same_second_does_not_overwrite(tmp_path):
    folder = tmp_path / "Documents"
    folder.mkdir()
    (folder / "a.txt").write_text("first")
    (folder / "a_42.txt").write_text("second")

    mover = FileMover(clock=lambda: 42)
    assert mover.resolve_collision(folder / "a.txt") == folder / "a_42_1.txt"
    assert mover.resolve_collision(folder / "free.txt") == folder / "free.txt"


def test_recursive_organize_in_place(tmp_path, settings):
    root = tmp_path / "root"
    (root / "Documents").mkdir(parents=True)
    (root / "sub1").mkdir()
    (root / "sub2").mkdir()
    (root / "a.pdf").write_text("a")
    (root / "Documents" / "b.pdf").write_text("b")
    (root / "sub1" / "c.jpg").write_text("c")
    (root / "sub1" / "dup.txt").write_text("first")
    (root / "sub2" / "dup.txt").write_text("second")

    records = DiskScanner(settings).scan(root, recursive=True).records
    result = organize(records, root, "type", mover=FileMover(clock=lambda: 1_700_000_000))

    assert result.moved == 4
    assert result.skipped == 1
    assert result.errors == 0
    files = sorted(str(p.relative_to(root)) for p in root.rglob("*") if p.is_file())
    assert files == sorted([
        os.path.join("Documents", "a.pdf"),
        os.path.join("Documents", "b.pdf"),
        os.path.join("Documents", "dup.txt"),
        os.path.join("Documents", "dup_1700000000.txt"),
        os.path.join("Images", "c.jpg"),
    ])
    assert (root / "Documents" / "dup.txt").read_text() == "first"
    assert (root / "Documents" / "dup_1700000000.txt").read_text() == "second"


def test_move_failure_counted_and_processing_continues(tmp_path):
    good = tmp_path / "good.txt"
    good.write_text("g")
    target = tmp_path / "out"
    moves = [
        PlannedMove(tmp_path / "vanished.txt", target / "Documents" / "vanished.txt"),
        PlannedMove(good, target / "Documents" / "good.txt"),
    ]

    result = FileMover().execute(moves)

    assert result.errors == 1
    assert result.moved == 1
    assert (target / "Documents" / "good.txt").exists()


def test_file_already_in_place_is_skipped(tmp_path):
    folder = tmp_path / "Documents"
    folder.mkdir()
    f = folder / "a.pdf"
    f.write_text("a")

    result = organize([make_record(f)], tmp_path, "type")

    assert result.skipped == 1
    assert result.moved == 0
    assert sorted(p.name for p in folder.iterdir()) == ["a.pdf"]


@pytest.mark.parametrize(
    "name,category,expected",
    [
        ("a.pdf", Category(CategoryKind.DOCUMENT), "Documents"),
        ("a.mkv", Category(CategoryKind.VIDEO), "Videos"),
        ("Makefile", Category.other("unknown"), "Other"),
        ("a.xyz", Category.other("xyz"), "Miscellaneous"),
        ("a.md", Category.other("Notes", custom=True), "Notes"),
    ],
)
def test_subfolder_by_type(name, category, expected, tmp_path):
    planner = DestinationPlanner(tmp_path, "type")
    assert planner.subfolder_for(make_record(name, category)) == expected


def test_subfolder_by_date_uses_local_time(tmp_path):
    ts = 1_600_000_000
    planner = DestinationPlanner(tmp_path, "date")
    assert planner.subfolder_for(make_record("a.pdf", last_modified=ts)) == datetime.fromtimestamp(ts).strftime("%Y-%m")


def test_subfolder_by_extension(tmp_path):
    planner = DestinationPlanner(tmp_path, "ext")
    assert planner.subfolder_for(make_record("notes.TXT")) == "TXT"
    assert planner.subfolder_for(make_record("README")) == "no_extension"


def test_unknown_scheme_falls_back_to_unsorted(tmp_path):
    planner = DestinationPlanner(tmp_path, "colour")
    rec = make_record("a.pdf")
    assert planner.subfolder_for(rec) == "Unsorted"
    assert planner.destination_for(rec) == tmp_path / "Unsorted" / "a.pdf"


def test_app_organize_by_date(tmp_path, settings):
    src = tmp_path / "src"
    src.mkdir()
    f = src / "old.txt"
    f.write_text("x")
    os.utime(f, (1_600_000_000, 1_600_000_000))

    result = TidyFSApp(settings).organize(src, scheme="date")

    month = datetime.fromtimestamp(1_600_000_000).strftime("%Y-%m")
    assert result.moved == 1
    assert (src / month / "old.txt").exists()
    assert settings.recent_directories[0] == str(src.resolve())


def test_app_rejects_invalid_scheme_before_touching_disk(pdf_and_jpg, tmp_path, settings):
    src, _ = pdf_and_jpg
    before = snapshot(tmp_path)

    with pytest.raises(ArgumentError):
        TidyFSApp(settings).organize(src, scheme="colour")

    assert snapshot(tmp_path) == before
    assert settings.recent_directories == []


def test_app_organize_uses_default_scheme(pdf_and_jpg, settings):
    src, _ = pdf_and_jpg
    settings.default_organization = "ext"

    result = TidyFSApp(settings).organize(src)

    assert result.moved == 2
    assert (src / "pdf" / "report.pdf").exists()
    assert (src / "jpg" / "photo.jpg").exists()
