import re

import pytest

from circuits_builder import ceremony
from circuits_builder.errors import MissingPrerequisite, ToolFailure


def test_generate_proving_key_command_sequence(make_context, tools):
    ctx = make_context()
    circuit = ctx.registry["zksign"]
    ceremony.generate_proving_key(ctx, circuit)

    cmds = tools.commands()
    assert cmds[0] == ["circom", "--r1cs", "--O2", "signature.circom"]
    assert cmds[1] == ["snarkjs", "groth16", "setup", "signature.r1cs", str(ctx.ptau_path), "zksign-0.zkey"]
    assert cmds[2] == ["snarkjs", "zkey", "contribute", "zksign-0.zkey", "zksign.zkey", "--name=LOCAL_BUILD", "-v"]
    assert cmds[3] == ["snarkjs", "zkey", "export", "verificationkey", "zksign.zkey", "zksign_verification_key.json"]
    assert {c["cwd"] for c in tools.calls} == {ctx.root / "mantle"}


def test_exactly_one_contribution_with_fresh_entropy(make_context, tools):
    ctx = make_context()
    circuit = ctx.registry["poq"]
    ceremony.generate_proving_key(ctx, circuit)
    ceremony.generate_proving_key(ctx, circuit)

    contributions = [c for c in tools.calls if c["cmd"][:3] == ["snarkjs", "zkey", "contribute"]]
    assert len(contributions) == 2
    for call in contributions:
        assert re.fullmatch(r"[0-9a-f]{64}\n", call["input"])
    assert contributions[0]["input"] != contributions[1]["input"]


def test_intermediate_key_is_removed(make_context, tools):
    ctx = make_context()
    circuit = ctx.registry["pol"]
    for _ in range(2):
        ceremony.generate_proving_key(ctx, circuit)
        assert not circuit.intermediate_zkey(ctx.root).exists()
        assert circuit.proving_key(ctx.root).is_file()
        assert circuit.verification_key(ctx.root).is_file()


def test_intermediate_key_removed_when_export_fails(make_context, tools):
    tools.fail_on = lambda cmd: cmd[:3] == ["snarkjs", "zkey", "export"]
    ctx = make_context()
    circuit = ctx.registry["poc"]
    with pytest.raises(ToolFailure):
        ceremony.generate_proving_key(ctx, circuit)
    assert not circuit.intermediate_zkey(ctx.root).exists()


def test_missing_ptau_is_fatal(make_context, tools):
    ctx = make_context()
    ctx.ptau_path.unlink()
    with pytest.raises(MissingPrerequisite, match="Powers of Tau file not found"):
        ceremony.generate_proving_key(ctx, ctx.registry["pol"])
    assert tools.calls == []


def test_missing_source_is_fatal(make_context, tools):
    ctx = make_context()
    circuit = ctx.registry["pol"]
    circuit.source_path(ctx.root).unlink()
    with pytest.raises(MissingPrerequisite, match="pol"):
        ceremony.generate_proving_key(ctx, circuit)


def test_contribution_entropy_length():
    assert len(ceremony.contribution_entropy()) == 64
