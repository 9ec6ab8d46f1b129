import json

import pytest

from huffstream import decode_huffman, encode_huffman
from huffstream.processor import compress_bytes


@pytest.fixture
def originals(tmp_path):
    src_dir = tmp_path / "orig"
    src_dir.mkdir()
    (src_dir / "text.txt").write_bytes(b"to be or not to be, that is the question\n" * 40)
    (src_dir / "empty.bin").write_bytes(b"")
    return src_dir


def test_encode_then_decode_and_verify(tmp_path, originals, capsys):
    packed = tmp_path / "packed"
    unpacked = tmp_path / "unpacked"
    summary = tmp_path / "summary.json"
    sources = sorted(str(p) for p in originals.iterdir())

    assert encode_huffman.main(sources + ["--out-dir", str(packed), "--summary", str(summary)]) == 0
    assert (packed / "text.txt.hf").exists()
    assert (packed / "empty.bin.hf").exists()
    assert "Encoded: 2" in capsys.readouterr().out

    report = json.loads(summary.read_text(encoding="utf-8"))
    assert len(report["files"]) == 2
    assert report["raw_bytes"] == (originals / "text.txt").stat().st_size
    assert report["weighted_ratio"] > 1.0

    packed_files = sorted(str(p) for p in packed.iterdir())
    rc = decode_huffman.main(packed_files + ["--out-dir", str(unpacked), "--verify-dir", str(originals)])
    assert rc == 0
    assert "Checked: 2, Failed: 0" in capsys.readouterr().out
    assert (unpacked / "text.txt").read_bytes() == (originals / "text.txt").read_bytes()


def test_encode_skips_existing_outputs(tmp_path, originals, capsys):
    src = str(originals / "text.txt")
    assert encode_huffman.main([src, "--out-dir", str(tmp_path)]) == 0
    capsys.readouterr()
    assert encode_huffman.main([src, "--out-dir", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "Encoded: 0" in out
    assert "Skipped: 1" in out


def test_encode_without_inputs_returns_1(tmp_path):
    assert encode_huffman.main([str(tmp_path / "nope")]) == 1


def test_decode_reports_corrupt_files(tmp_path, capsys):
    good = tmp_path / "good.hf"
    bad = tmp_path / "bad.hf"
    good.write_bytes(compress_bytes(b"fine data"))
    bad.write_bytes(b"not a huffman file")
    rc = decode_huffman.main([str(bad), str(good), "--out-dir", str(tmp_path / "out")])
    captured = capsys.readouterr()
    assert rc == 2
    assert "Checked: 1, Failed: 1" in captured.out
    assert "invalid magic number" in captured.err
    assert not (tmp_path / "out" / "bad").exists()
    assert (tmp_path / "out" / "good").read_bytes() == b"fine data"


def test_decode_detects_mismatch(tmp_path, capsys):
    packed = tmp_path / "data.hf"
    packed.write_bytes(compress_bytes(b"decoded"))
    verify = tmp_path / "verify"
    verify.mkdir()
    (verify / "data").write_bytes(b"different")
    rc = decode_huffman.main([str(packed), "--out-dir", str(tmp_path / "out"), "--verify-dir", str(verify)])
    assert rc == 2
    assert "Mismatch" in capsys.readouterr().err


def test_decode_output_name_without_suffix(tmp_path):
    assert decode_huffman.output_path("/x/archive.bin", str(tmp_path), ".hf") == str(tmp_path / "archive.bin.unhf")
    assert decode_huffman.output_path("/x/archive.bin.hf", None, ".hf") == "/x/archive.bin"


def test_encode_rejects_empty_suffix(originals, capsys):
    src = originals / "text.txt"
    before = src.read_bytes()
    with pytest.raises(SystemExit) as excinfo:
        encode_huffman.main([str(src), "--suffix", "", "--overwrite"])
    assert excinfo.value.code == 2
    assert "--suffix must not be empty" in capsys.readouterr().err
    assert src.read_bytes() == before


def test_encode_counts_same_file_as_error(tmp_path, originals, capsys):
    src = originals / "text.txt"
    before = src.read_bytes()
    link = tmp_path / "text.txt.hf"
    link.symlink_to(src)
    assert encode_huffman.main([str(src), "--out-dir", str(tmp_path), "--overwrite"]) == 2
    assert "same file" in capsys.readouterr().err
    assert src.read_bytes() == before
