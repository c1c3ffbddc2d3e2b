import pandas as pd
import pytest
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from fhe_bsgs.config import BenchConfig
from fhe_bsgs.errors import PreconditionError
from fhe_bsgs.fft_bench import main, packing_mode, run_bench, run_fft


@pytest.mark.parametrize(
    "size,slots,mode",
    [(16, 32, "fully_packed"), (16, 128, "packed"), (64, 32, "multiple")],
)
def test_packing_mode(size, slots, mode):
    assert packing_mode(size, slots) == mode


@pytest.mark.parametrize("size,slots", [(16, 64), (24, 32)])
def test_packing_mode_rejects(size, slots):
    with pytest.raises(PreconditionError):
        packing_mode(size, slots)


@pytest.mark.parametrize("root", ["minimal", "groth16"])
@pytest.mark.parametrize("size,slots", [(16, 32), (16, 128), (64, 32)])
def test_run_fft(size, slots, root):
    config = BenchConfig(
        sizes=(size,), slot_count=slots, field_name="q65537", root_convention=root, verbose=False
    )
    row = run_fft(size, config)
    assert row["ok"]
    assert row["size"] == size
    assert row["rotations"] > 0
    assert row["transform_s"] >= 0


def test_run_bench_default_field():
    config = BenchConfig(sizes=(4, 16), slot_count=32, verbose=False)
    bench = run_bench(config)
    df = bench.to_frame()
    assert list(df["size"]) == [4, 16]
    assert list(df["mode"]) == ["packed", "fully_packed"]
    assert df["ok"].all()


def test_main_writes_csv(tmp_path, capsys):
    outfile = tmp_path / "fft.csv"
    code = main(
        [
            "--sizes", "8", "32",
            "--slots", "64",
            "--field", "q65537",
            "--strategy", "direct",
            "--outfile", str(outfile),
            "--quiet",
        ]
    )
    assert code == 0
    df = pd.read_csv(outfile)
    assert list(df["size"]) == [8, 32]
    assert "Homomorphic FFT Results" in capsys.readouterr().out
