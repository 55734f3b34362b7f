import asyncio

from PIL import Image

from core.compression.transformer import PillowTransformer
from core.models import SourceImage
from core.pipeline import ImagePipeline
from core.workspace import WorkspaceCleaner


def _source_in(work_dir, name, size=(64, 48)):
    path = work_dir / name
    Image.new("RGB", size, (120, 80, 40)).save(path, format="PNG")
    return SourceImage(uri=str(path), width=size[0], height=size[1])


def test_release_removes_only_files_inside_work_dir(tmp_path):
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    inside = work_dir / "a.jpg"
    inside.write_bytes(b"a")
    outside = tmp_path / "gallery.jpg"
    outside.write_bytes(b"b")
    cleaner = WorkspaceCleaner(work_dir)

    assert cleaner.release(inside.as_uri())
    assert not cleaner.release(str(outside))
    assert not cleaner.release("https://example.com/a.jpg")

    assert not inside.exists()
    assert outside.exists()


def test_release_missing_file_is_harmless(tmp_path):
    cleaner = WorkspaceCleaner(tmp_path)
    assert cleaner.release(str(tmp_path / "gone.jpg"))


def test_clear_empties_work_dir(tmp_path):
    for name in ("x.jpg", "y.png"):
        (tmp_path / name).write_bytes(b"0")
    assert WorkspaceCleaner(tmp_path).clear() == 2
    assert list(tmp_path.iterdir()) == []
    assert WorkspaceCleaner(tmp_path / "missing").clear() == 0


def test_work_dir_stays_bounded_across_sessions_of_use(tmp_path):
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    cleaner = WorkspaceCleaner(work_dir)
    pipeline = ImagePipeline(PillowTransformer(work_dir), release=cleaner.release)

    for round_no in range(3):
        pipeline.select_source(_source_in(work_dir, f"source_{round_no}.png"))
        for key in ("lossy", "lossless", "efficient"):
            asyncio.run(pipeline.apply_policy(key))

    remaining = sorted(p.name for p in work_dir.iterdir())
    assert len(remaining) == 2
    assert "source_2.png" in remaining
    assert pipeline.get_artifact().uri.endswith(remaining[0])


def test_superseded_result_file_is_removed(tmp_path):
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    cleaner = WorkspaceCleaner(work_dir)
    pipeline = ImagePipeline(PillowTransformer(work_dir), release=cleaner.release)
    pipeline.select_source(_source_in(work_dir, "source.png"))

    async def scenario():
        first = asyncio.create_task(pipeline.apply_policy("lossy"))
        second = asyncio.create_task(pipeline.apply_policy("lossless"))
        return await asyncio.gather(first, second)

    first, second = asyncio.run(scenario())

    assert first is None
    assert sorted(p.name for p in work_dir.iterdir()) == sorted(
        ["source.png", second.uri.split("/")[-1]]
    )
