"""
CLI Tests
Tests for boiler_merkle_cli (build, show, prove, verify, demo, config).
"""
import json
import logging

import pytest

from boiler_merkle.crypto.hashing import hash_leaf, to_hex
from boiler_merkle.merkle.merkle_tree import compute_merkle_root
from boiler_merkle_cli.main import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    create_parser,
    main,
)


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every CLI test in an empty directory and reset logging afterwards."""
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)


def run(argv, capsys):
    code = main(["--log-level", "ERROR", *argv])
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def write_proof(tmp_path, capsys, blocks, index, *extra):
    proof_path = tmp_path / "proof.json"
    code, _, _ = run([*extra, "prove", *blocks, "--index", str(index), "--out", str(proof_path)], capsys)
    assert code == EXIT_SUCCESS
    return proof_path


class TestParser:
    def test_no_command(self, capsys):
        assert main([]) == EXIT_RUNTIME_ERROR

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out


class TestBuild:
    def test_prints_root(self, capsys):
        code, out, _ = run(["build", "a", "b", "c"], capsys)

        assert code == EXIT_SUCCESS
        assert f"root: {to_hex(compute_merkle_root(['a', 'b', 'c']))}" in out
        assert "padded to 4" in out

    def test_json_summary(self, capsys):
        code, out, _ = run(["build", "a", "b", "c", "d", "e", "--json"], capsys)
        data = json.loads(out)

        assert code == EXIT_SUCCESS
        assert data["leaf_count"] == 5
        assert data["padded_count"] == 8
        assert data["depth"] == 3
        assert data["mode"] == "positional"

    def test_blocks_from_file(self, capsys, tmp_path, sample_blocks):
        path = tmp_path / "blocks.txt"
        path.write_text("\n".join(sample_blocks) + "\n", encoding="utf-8")

        code, out, _ = run(["build", "--file", str(path), "--json"], capsys)

        assert code == EXIT_SUCCESS
        assert json.loads(out)["root"] == to_hex(compute_merkle_root(sample_blocks))

    def test_non_utf8_file_hashed_as_bytes(self, capsys, tmp_path):
        path = tmp_path / "blocks.bin"
        path.write_bytes(b"ok\n\xff\xfe\n")

        code, out, _ = run(["build", "--file", str(path), "--json"], capsys)

        assert code == EXIT_SUCCESS
        assert json.loads(out)["root"] == to_hex(compute_merkle_root([b"ok", b"\xff\xfe"]))

    def test_missing_block_file_fails(self, capsys, tmp_path):
        code, _, _ = run(["build", "--file", str(tmp_path / "absent.txt")], capsys)

        assert code == EXIT_RUNTIME_ERROR

    def test_empty_input_fails(self, capsys):
        code, _, err = run(["build"], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "empty" in err.lower()

    def test_unknown_algorithm_fails(self, capsys):
        code, _, err = run(["--algorithm", "nope", "build", "a"], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "nope" in err

    def test_tree_rendering(self, capsys):
        code, out, _ = run(["build", "a", "b", "--tree", "--short"], capsys)

        assert code == EXIT_SUCCESS
        assert "|-- 0x" in out

    def test_show(self, capsys):
        code, out, _ = run(["show", "a", "b", "c"], capsys)

        assert code == EXIT_SUCCESS
        assert out.startswith("Merkle Tree:")
        assert "(padding)" in out


class TestProveAndVerify:
    def test_prove_to_stdout(self, capsys, sample_blocks):
        code, out, _ = run(["prove", *sample_blocks, "--index", "1"], capsys)
        data = json.loads(out)

        assert code == EXIT_SUCCESS
        assert data["leaf_index"] == 1
        assert len(data["steps"]) == 2

    def test_prove_out_of_range(self, capsys, sample_blocks):
        code, _, err = run(["prove", *sample_blocks, "--index", "4"], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "out of range" in err

    def test_verify_block(self, capsys, tmp_path, sample_blocks):
        proof_path = write_proof(tmp_path, capsys, sample_blocks, 1)
        root = to_hex(compute_merkle_root(sample_blocks))

        code, out, _ = run(
            ["verify", "--root", root, "--proof", str(proof_path), "--block", sample_blocks[1]],
            capsys,
        )

        assert code == EXIT_SUCCESS
        assert "verified: true" in out

    def test_verify_leaf_digest(self, capsys, tmp_path, sample_blocks):
        proof_path = write_proof(tmp_path, capsys, sample_blocks, 2)
        root = to_hex(compute_merkle_root(sample_blocks))
        leaf = to_hex(hash_leaf(sample_blocks[2]))

        code, _, _ = run(
            ["verify", "--root", root, "--proof", str(proof_path), "--leaf", leaf],
            capsys,
        )

        assert code == EXIT_SUCCESS

    def test_verify_wrong_block(self, capsys, tmp_path, sample_blocks):
        proof_path = write_proof(tmp_path, capsys, sample_blocks, 1)
        root = to_hex(compute_merkle_root(sample_blocks))

        code, out, _ = run(
            ["verify", "--root", root, "--proof", str(proof_path), "--block", "impostor", "--json"],
            capsys,
        )
        data = json.loads(out)

        assert code == EXIT_VERIFICATION_FAILED
        assert data["verified"] is False
        assert data["errors"]

    def test_verify_against_tampered_root(self, capsys, tmp_path, sample_blocks):
        proof_path = write_proof(tmp_path, capsys, sample_blocks, 0)
        tampered = list(sample_blocks)
        tampered[2] = "another example data blocK"
        root = to_hex(compute_merkle_root(tampered))

        code, _, _ = run(["verify", "--root", root, "--proof", str(proof_path)], capsys)

        assert code == EXIT_VERIFICATION_FAILED

    def test_verify_shape_check(self, capsys, tmp_path, sample_blocks):
        proof_path = write_proof(tmp_path, capsys, sample_blocks, 0)
        root = to_hex(compute_merkle_root(sample_blocks))

        code, out, _ = run(
            ["verify", "--root", root, "--proof", str(proof_path), "--expected-leaves", "9", "--json"],
            capsys,
        )
        data = json.loads(out)

        assert code == EXIT_VERIFICATION_FAILED
        assert data["shape_ok"] is False

    def test_verify_missing_proof_file(self, capsys, tmp_path):
        code, _, err = run(
            ["verify", "--root", "0x00", "--proof", str(tmp_path / "absent.json")],
            capsys,
        )

        assert code == EXIT_RUNTIME_ERROR
        assert "not found" in err

    def test_verify_malformed_proof_file(self, capsys, tmp_path):
        path = tmp_path / "proof.json"
        path.write_text(json.dumps({"steps": []}))

        code, _, err = run(["verify", "--root", "0x00", "--proof", str(path)], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "Missing proof field" in err

    def test_sorted_mode_round_trip(self, capsys, tmp_path, sample_blocks):
        proof_path = write_proof(tmp_path, capsys, sample_blocks, 3, "--mode", "sorted")
        root = to_hex(compute_merkle_root(sample_blocks, mode="sorted"))

        assert json.loads(proof_path.read_text())["mode"] == "sorted"

        code, _, _ = run(
            ["--mode", "sorted", "verify", "--root", root, "--proof", str(proof_path),
             "--block", sample_blocks[3]],
            capsys,
        )

        assert code == EXIT_SUCCESS

    def test_sorted_proof_rejected_by_positional_verifier(self, capsys, tmp_path, sample_blocks):
        proof_path = write_proof(tmp_path, capsys, sample_blocks, 3, "--mode", "sorted")
        root = to_hex(compute_merkle_root(sample_blocks, mode="sorted"))

        code, out, _ = run(
            ["verify", "--root", root, "--proof", str(proof_path), "--json"],
            capsys,
        )
        data = json.loads(out)

        assert code == EXIT_VERIFICATION_FAILED
        assert data["mode"] == "positional"
        assert "recorded in sorted mode" in data["errors"][0]

    def test_mode_downgrade_cannot_move_a_block(self, capsys, tmp_path, sample_blocks):
        """Block 1's proof relabelled as sorted and index 0 must not verify."""
        proof_path = write_proof(tmp_path, capsys, sample_blocks, 1)
        data = json.loads(proof_path.read_text())
        data["leaf_index"] = 0
        data["mode"] = "sorted"
        proof_path.write_text(json.dumps(data))
        root = to_hex(compute_merkle_root(sample_blocks))

        code, out, _ = run(
            ["verify", "--root", root, "--proof", str(proof_path),
             "--block", sample_blocks[1], "--expected-leaves", "4"],
            capsys,
        )

        assert code == EXIT_VERIFICATION_FAILED
        assert "verified: false" in out
        assert "shape_ok: false" in out

    def test_moved_index_rejected_without_shape_check(self, capsys, tmp_path, sample_blocks):
        proof_path = write_proof(tmp_path, capsys, sample_blocks, 1)
        data = json.loads(proof_path.read_text())
        data["leaf_index"] = 0
        proof_path.write_text(json.dumps(data))
        root = to_hex(compute_merkle_root(sample_blocks))

        code, _, _ = run(
            ["verify", "--root", root, "--proof", str(proof_path), "--block", sample_blocks[1]],
            capsys,
        )

        assert code == EXIT_VERIFICATION_FAILED


class TestDemo:
    def test_demo(self, capsys):
        code, out, _ = run(["demo"], capsys)

        assert code == EXIT_SUCCESS
        assert out.startswith("Merkle Tree:")
        assert "verified: true" in out
        assert "tampered root:" in out

    def test_demo_sorted_mode(self, capsys):
        code, out, _ = run(["--mode", "sorted", "demo", "--index", "2"], capsys)

        assert code == EXIT_SUCCESS
        assert "verified: true" in out

    def test_demo_bad_index(self, capsys):
        code, _, err = run(["demo", "--index", "7"], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "--index" in err


class TestConfigCommand:
    def test_show(self, capsys):
        code, out, _ = run(["config", "--show"], capsys)

        assert code == EXIT_SUCCESS
        assert json.loads(out)["hash_algorithm"] == "sha256"

    def test_init_creates_file_once(self, capsys, tmp_path):
        code, _, _ = run(["config", "--init"], capsys)

        assert code == EXIT_SUCCESS
        assert (tmp_path / "boiler-merkle.json").exists()

        code, _, err = run(["config", "--init"], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "already exists" in err

    def test_config_file_drives_mode(self, capsys, tmp_path, sample_blocks):
        (tmp_path / "boiler-merkle.json").write_text(json.dumps({"proof_mode": "sorted"}))

        code, out, _ = run(["build", *sample_blocks, "--json"], capsys)

        assert code == EXIT_SUCCESS
        assert json.loads(out)["mode"] == "sorted"

    def test_malformed_yaml_config(self, capsys, tmp_path):
        (tmp_path / "boiler-merkle.yaml").write_text("proof_mode: [unclosed\n")

        code, _, err = run(["build", "a"], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "Invalid YAML" in err

    def test_non_string_log_level_in_config(self, capsys, tmp_path):
        (tmp_path / "boiler-merkle.json").write_text(json.dumps({"log_level": 10}))

        code, _, err = run(["build", "a"], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "log level" in err

    def test_unknown_algorithm_in_config(self, capsys, tmp_path):
        (tmp_path / "boiler-merkle.json").write_text(json.dumps({"hash_algorithm": "md0"}))

        code, _, err = run(["build", "a"], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "md0" in err

    def test_invalid_config_file(self, capsys, tmp_path):
        (tmp_path / "boiler-merkle.json").write_text(json.dumps({"proof_mode": "zigzag"}))

        code, _, err = run(["build", "a"], capsys)

        assert code == EXIT_RUNTIME_ERROR
        assert "configuration" in err.lower()
