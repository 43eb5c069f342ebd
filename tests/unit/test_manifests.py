"""
Unit tests for manifest staging and namespace lookup.
"""

import os
from contextlib import ExitStack

import pytest

from kubectl_mcp.executor import MalformedRequestError
from kubectl_mcp.tools import manifest_namespace, resolve_manifest, staged_manifest

POD_MANIFEST = """\
apiVersion: v1
kind: Pod
metadata:
  name: cp-test-pod
  namespace: test-cp
spec:
  containers:
    - name: c
      image: busybox
"""


class TestManifestNamespace:
    """Namespace comes from the document whose metadata.name matches."""

    def test_namespace_from_matching_document(self, tmp_path):
        path = tmp_path / "pod.yaml"
        path.write_text(POD_MANIFEST)

        assert manifest_namespace(str(path), "cp-test-pod") == "test-cp"

    def test_picks_named_document_from_many(self, tmp_path):
        path = tmp_path / "all.yaml"
        path.write_text(
            "apiVersion: v1\nkind: Namespace\nmetadata:\n  name: test-cp\n"
            "---\n"
            f"{POD_MANIFEST}"
        )

        assert manifest_namespace(str(path), "cp-test-pod") == "test-cp"

    @pytest.mark.parametrize(
        "content",
        [
            "kind: Pod\nmetadata:\n  name: cp-test-pod\n",
            "kind: Pod\nmetadata:\n  name: other\n  namespace: test-cp\n",
            "kind: Pod\n",
            "metadata: [unclosed\n",
            "",
        ],
    )
    def test_no_namespace(self, tmp_path, content: str):
        path = tmp_path / "pod.yaml"
        path.write_text(content)

        assert manifest_namespace(str(path), "cp-test-pod") is None


class TestResolveManifest:
    """Exactly one of manifest or manifestPath."""

    def test_inline_manifest_staged_and_removed(self):
        with ExitStack() as stack:
            path = resolve_manifest({"manifest": POD_MANIFEST}, stack)
            with open(path, encoding="utf-8") as f:
                assert f.read() == POD_MANIFEST

        assert not os.path.exists(path)

    def test_existing_path_used_as_is(self, tmp_path):
        path = tmp_path / "pod.yaml"
        path.write_text(POD_MANIFEST)

        with ExitStack() as stack:
            assert resolve_manifest({"manifestPath": str(path)}, stack) == str(path)
        assert path.exists()

    @pytest.mark.parametrize(
        "arguments",
        [
            {},
            {"manifest": POD_MANIFEST, "manifestPath": "/tmp/pod.yaml"},
            {"manifestPath": "/nonexistent/pod.yaml"},
        ],
    )
    def test_rejected(self, arguments):
        with ExitStack() as stack:
            with pytest.raises(MalformedRequestError):
                resolve_manifest(arguments, stack)


def test_staged_manifest_removed_on_error():
    with pytest.raises(RuntimeError):
        with staged_manifest("kind: Pod\n") as path:
            assert os.path.exists(path)
            raise RuntimeError("apply failed")

    assert not os.path.exists(path)
