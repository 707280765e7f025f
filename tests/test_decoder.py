import pytest

from kubediff.core.errors import DecodeError
from kubediff.pipeline.decoder import DocumentDecoder
from kubediff.pipeline.exporter import ManifestExporter
from samples import CONFIGMAP, DEPLOYMENT, SERVICE, stream


def test_multi_document_order_is_preserved():
    docs = DocumentDecoder().decode(stream(SERVICE, DEPLOYMENT, CONFIGMAP).encode())
    assert [d["kind"] for d in docs] == ["Service", "Deployment", "ConfigMap"]


@pytest.mark.parametrize("raw", [
    b"",
    b"   \n",
    b"---\n---\n",
    b"# only a comment\n",
    b"--- {}\n--- []\n",
])
def test_empty_documents_are_dropped(raw):
    assert DocumentDecoder().decode(raw) == []


def test_empty_documents_between_real_ones_are_skipped():
    raw = ("---\n" + SERVICE + "---\n---\n" + CONFIGMAP).encode()
    docs = DocumentDecoder().decode(raw)
    assert [d["kind"] for d in docs] == ["Service", "ConfigMap"]


def test_syntax_error_names_the_stream():
    with pytest.raises(DecodeError) as exc:
        DocumentDecoder().decode(b"kind: Service\nmetadata: [unclosed\n", "second file")
    assert exc.value.side == "second file"
    assert "second file" in str(exc.value)


def test_syntax_error_discards_earlier_documents():
    raw = (SERVICE + "---\nkind: Pod\nmetadata: [unclosed\n").encode()
    with pytest.raises(DecodeError):
        DocumentDecoder().decode(raw)


def test_duplicate_keys_are_rejected():
    with pytest.raises(DecodeError):
        DocumentDecoder().decode(b"kind: Service\nkind: Pod\n")


def test_invalid_utf8_is_a_decode_error():
    with pytest.raises(DecodeError) as exc:
        DocumentDecoder().decode(b"kind: \xff\xfe\xfa\n", "first file")
    assert "UTF-8" in exc.value.reason


def test_byte_order_mark_is_tolerated():
    docs = DocumentDecoder().decode("\ufeffkind: Pod\n".encode("utf-8"))
    assert docs[0]["kind"] == "Pod"


def test_scalars_are_plain_builtins():
    doc = DocumentDecoder().decode(DEPLOYMENT)[0]
    replicas = doc["spec"]["replicas"]
    assert type(replicas) is int
    assert type(doc["metadata"]["name"]) is str


def test_presentation_is_not_carried_into_the_tree():
    """
    IDEMPOTENCY TEST: comments and quoting styles must not survive a
    decode/export pass, otherwise they would show up as diff noise.
    """
    commented = "# header\nkind: 'Pod'  # inline\nmetadata:\n  name: \"web\"\n"
    plain = "kind: Pod\nmetadata:\n  name: web\n"

    decoder, exporter = DocumentDecoder(), ManifestExporter()
    assert exporter.export(decoder.decode(commented)) == exporter.export(decoder.decode(plain))
    assert "#" not in exporter.export(decoder.decode(commented))


def test_anchored_booleans_stay_booleans():
    doc = DocumentDecoder().decode("spec:\n  enabled: &flag true\n  mirrored: *flag\n  disabled: &no false\n")[0]
    assert doc["spec"]["enabled"] is True
    assert doc["spec"]["mirrored"] is True
    assert doc["spec"]["disabled"] is False
    assert "enabled: true" in ManifestExporter().export([doc])
