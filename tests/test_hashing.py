import math
import random
import string

import pytest

from epr.domain.bills.exceptions import EncodingError
from epr.domain.bills.hashing import canonical_bytes, generate_bill_hash, verify_bill_hash


def _random_leaf(rng: random.Random):
    kind = rng.choice(["int", "str", "bool", "none", "float"])
    if kind == "int":
        return rng.randint(-10_000, 10_000)
    if kind == "str":
        return "".join(rng.choice(string.ascii_letters + "₹é ") for _ in range(rng.randint(0, 12)))
    if kind == "bool":
        return rng.random() < 0.5
    if kind == "none":
        return None
    return round(rng.uniform(-1000, 1000), 2)


def _random_document(rng: random.Random, depth: int = 0):
    if depth >= 3 or rng.random() < 0.3:
        return _random_leaf(rng)
    if rng.random() < 0.7:
        keys = rng.sample(["amount", "items", "customer", "gstin", "notes", "tax", "date", "qty", "sku"], rng.randint(1, 6))
        return {key: _random_document(rng, depth + 1) for key in keys}
    return [_random_document(rng, depth + 1) for _ in range(rng.randint(0, 4))]


def _shuffled(value, rng: random.Random):
    if isinstance(value, dict):
        keys = list(value)
        rng.shuffle(keys)
        return {key: _shuffled(value[key], rng) for key in keys}
    if isinstance(value, list):
        return [_shuffled(item, rng) for item in value]
    return value


def _leaf_paths(value, path=()):
    if isinstance(value, dict):
        for key, child in value.items():
            yield from _leaf_paths(child, path + (key,))
    elif isinstance(value, list):
        for index, child in enumerate(value):
            yield from _leaf_paths(child, path + (index,))
    else:
        yield path


def _replace_leaf(value, path, new_leaf):
    if not path:
        return new_leaf
    head, rest = path[0], path[1:]
    if isinstance(value, dict):
        copy = dict(value)
    else:
        copy = list(value)
    copy[head] = _replace_leaf(value[head], rest, new_leaf)
    return copy


def _documents(count: int = 150):
    rng = random.Random(20261019)
    docs = []
    while len(docs) < count:
        doc = {"bill": _random_document(rng), "seq": len(docs)}
        docs.append(doc)
    return docs


def test_digest_is_lowercase_sha256_hex():
    digest = generate_bill_hash({"amount": 100})
    assert len(digest) == 64
    assert digest == digest.lower()
    assert all(ch in "0123456789abcdef" for ch in digest)


def test_hash_ignores_key_order():
    rng = random.Random(7)
    for doc in _documents():
        assert generate_bill_hash(doc) == generate_bill_hash(_shuffled(doc, rng))


def test_hash_changes_when_any_single_leaf_changes():
    rng = random.Random(11)
    for doc in _documents():
        paths = list(_leaf_paths(doc))
        path = rng.choice(paths)
        original = doc
        for key in path:
            original = original[key]
        replacement = f"changed-{original!r}"
        mutated = _replace_leaf(doc, path, replacement)
        assert generate_bill_hash(mutated) != generate_bill_hash(doc)


def test_hash_is_deterministic():
    doc = {"b": [1, {"z": 1, "a": 2}], "a": "x"}
    assert generate_bill_hash(doc) == generate_bill_hash(doc)
    assert canonical_bytes(doc) == b'{"a":"x","b":[1,{"a":2,"z":1}]}'


def test_sequence_order_is_significant():
    assert generate_bill_hash({"items": [1, 2]}) != generate_bill_hash({"items": [2, 1]})


def test_verify_bill_hash():
    doc = {"amount": "1000.00", "customer": {"name": "R"}}
    digest = generate_bill_hash(doc)
    assert verify_bill_hash({"customer": {"name": "R"}, "amount": "1000.00"}, digest)
    assert not verify_bill_hash({"amount": "1000.01", "customer": {"name": "R"}}, digest)


@pytest.mark.parametrize(
    "document",
    [
        {"value": math.nan},
        {"value": math.inf},
        {"value": object()},
        {"value": {1, 2}},
        {"name": "\ud800"},
        {"nested": [{"memo": "ok \udfff"}]},
        {1: "a", "1": "b"},
        {"outer": {2: "x"}},
    ],
)
def test_unencodable_documents_raise_encoding_error(document):
    with pytest.raises(EncodingError):
        generate_bill_hash(document)


def test_keys_that_stringify_alike_do_not_collide():
    with pytest.raises(EncodingError):
        generate_bill_hash({1: "a", "1": "b"})
    assert generate_bill_hash({"1": "b"}) == generate_bill_hash({"1": "b"})


def test_non_ascii_text_hashes_as_utf8():
    assert canonical_bytes({"payee": "₹ Rao"}) == '{"payee":"₹ Rao"}'.encode("utf-8")
