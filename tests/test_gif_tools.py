from PIL import Image

from meshcalc.gif_codec import load_gif
from meshcalc.gif_tools import DEMO_COLORS, create_demo, extract_frames, main


def test_create_demo_writes_expected_animation(tmp_path):
    path = tmp_path / "demo1.gif"
    created = create_demo(path)
    loaded = load_gif(path)
    assert loaded.frame_count() == created.frame_count() == 10
    assert loaded.canvas_size() == (300, 300)
    assert loaded.global_color_table == DEMO_COLORS
    assert loaded.background_color == (0, 0, 0)
    for index in range(10):
        assert loaded.frame_offset(index) == (index * 20, index * 20)
        assert loaded.frame_delay(index) == created.default_delay
        assert loaded.frame_transparent_color(index) == (0, 0, 0)


def test_demo_frames_show_the_rectangle(tmp_path):
    path = tmp_path / "demo1.gif"
    create_demo(path)
    frame = load_gif(path).frame(3).convert("RGB")
    assert frame.size == (100, 100)
    assert frame.getpixel((20, 20)) == (255, 0, 0)
    assert frame.getpixel((50, 50)) == (0, 0, 0)


def test_extract_frames_writes_pngs(tmp_path):
    source = tmp_path / "test.gif"
    create_demo(source)
    out_dir = tmp_path / "frames"
    lines = extract_frames(source, out_dir)
    assert len(lines) == 10
    assert lines[3] == "Frame 3: size 100X100 at (60, 60)"
    for index in range(10):
        with Image.open(out_dir / f"test_{index}.png") as png:
            assert png.size == (100, 100)


def test_main_create_and_extract(tmp_path, capsys):
    path = tmp_path / "anim.gif"
    assert main(["create", str(path)]) == 0
    assert load_gif(path).frame_count() == 10
    assert main(["extract", str(path)]) == 0
    output = capsys.readouterr().out
    assert "Frame 0: size 100X100 at (0, 0)" in output
    assert (tmp_path / "anim_9.png").exists()


def test_main_reports_missing_file(tmp_path, capsys):
    assert main(["extract", str(tmp_path / "missing.gif")]) == 1
    assert "error" in capsys.readouterr().err