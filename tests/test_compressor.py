import pytest

import compressor


def test_cli_round_trip(tmp_path, capsys):
    src = tmp_path / "notes.txt"
    packed = tmp_path / "notes.hf"
    restored = tmp_path / "notes.out"
    src.write_bytes(b"she sells sea shells by the sea shore\n" * 40)

    assert compressor.main(["compress", str(src), str(packed)]) == 0
    assert compressor.main(["decompress", str(packed), str(restored)]) == 0
    assert restored.read_bytes() == src.read_bytes()
    assert packed.stat().st_size < src.stat().st_size
    assert "ratio" in capsys.readouterr().out


def test_cli_empty_file(tmp_path):
    src = tmp_path / "empty"
    packed = tmp_path / "empty.hf"
    restored = tmp_path / "empty.out"
    src.write_bytes(b"")

    assert compressor.main(["compress", str(src), str(packed)]) == 0
    assert compressor.main(["decompress", str(packed), str(restored)]) == 0
    assert restored.read_bytes() == b""


def test_cli_rejects_non_compressed_input_and_removes_output(tmp_path, capsys):
    src = tmp_path / "plain.txt"
    dst = tmp_path / "plain.out"
    src.write_bytes(b"not a compressed file")

    assert compressor.main(["decompress", str(src), str(dst)]) == 1
    assert not dst.exists()
    assert "illegal header" in capsys.readouterr().err


def test_cli_truncated_input_removes_output(tmp_path):
    src = tmp_path / "data.bin"
    packed = tmp_path / "data.hf"
    dst = tmp_path / "data.out"
    src.write_bytes(bytes(range(256)) * 4)
    assert compressor.main(["compress", str(src), str(packed)]) == 0
    packed.write_bytes(packed.read_bytes()[:-2])

    assert compressor.main(["decompress", str(packed), str(dst)]) == 1
    assert not dst.exists()


def test_cli_missing_source(tmp_path, capsys):
    assert compressor.main(["compress", str(tmp_path / "nope"), str(tmp_path / "out")]) == 2
    assert "no such file" in capsys.readouterr().err


def test_cli_debug_trace(tmp_path, capsys):
    src = tmp_path / "abc.txt"
    src.write_bytes(b"abc")
    assert compressor.main(["--debug", "1", "compress", str(src), str(tmp_path / "abc.hf")]) == 0
    assert "header bits" in capsys.readouterr().err


def test_cli_corrupt_header_removes_output(tmp_path, capsys):
    src = tmp_path / "zeros.hf"
    dst = tmp_path / "zeros.out"
    src.write_bytes(bytes.fromhex("face8201") + b"\x00" * 400)

    assert compressor.main(["decompress", str(src), str(dst)]) == 1
    assert not dst.exists()
    assert "deeper" in capsys.readouterr().err


def test_cli_refuses_same_source_and_destination(tmp_path, capsys):
    src = tmp_path / "notes.txt"
    data = b"keep me intact\n" * 10
    src.write_bytes(data)

    assert compressor.main(["compress", str(src), str(src)]) == 2
    assert src.read_bytes() == data
    assert "input file" in capsys.readouterr().err


def test_cli_unwritable_destination(tmp_path, capsys):
    src = tmp_path / "notes.txt"
    src.write_bytes(b"abc")
    dst = tmp_path / "outdir"
    dst.mkdir()

    assert compressor.main(["compress", str(src), str(dst)]) == 1
    assert dst.is_dir()
    assert "compress failed" in capsys.readouterr().err


def test_run_removes_output_on_interrupt(tmp_path, monkeypatch):
    src = tmp_path / "notes.txt"
    dst = tmp_path / "notes.hf"
    src.write_bytes(b"abc")

    def interrupted(bit_in, bit_out, debug):
        with bit_out:
            bit_out.write_bits(32, 0xFACE8201)
            raise KeyboardInterrupt

    monkeypatch.setattr(compressor.huff, "compress", interrupted)
    with pytest.raises(KeyboardInterrupt):
        compressor.run("compress", src, dst)
    assert not dst.exists()
