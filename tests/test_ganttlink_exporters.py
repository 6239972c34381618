from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from PIL import Image

from ganttlink.exporters import export_snapshot_bundle
from ganttlink.schema import Bar, Relationship, Task
from ganttlink.store import InMemoryTaskStore


def _store() -> InMemoryTaskStore:
    return InMemoryTaskStore(
        [
            Task("A", Bar(x=0, width=100)),
            Task("B", Bar(x=120, width=60, y=30)),
            Task("C", Bar(x=150, width=40, y=60), locked=True),
        ]
    )


class SnapshotExportersTests(unittest.TestCase):
    def test_export_bundle_writes_ascii_markdown_png(self) -> None:
        rels = [Relationship("A", "B", "FS", 20), Relationship("B", "C", "SS", 0, elastic=False)]
        with tempfile.TemporaryDirectory() as tmp:
            bundle = export_snapshot_bundle(_store(), rels, out_dir=Path(tmp), prefix="unit")

            self.assertEqual(bundle.ascii_snapshot.name, "unit_snapshot.txt")
            self.assertTrue(bundle.ascii_snapshot.exists())
            self.assertTrue(bundle.markdown_snapshot.exists())
            self.assertTrue(bundle.png_snapshot.exists())
            self.assertGreater(bundle.png_snapshot.stat().st_size, 0)

            markdown = bundle.markdown_snapshot.read_text(encoding="utf-8")
            self.assertTrue(markdown.startswith("# Schedule Snapshot"))
            self.assertIn("```text", markdown)
            self.assertIn("fixed violated", bundle.ascii_snapshot.read_text(encoding="utf-8"))

            with Image.open(bundle.png_snapshot) as image:
                self.assertEqual(image.mode, "RGB")
                self.assertGreaterEqual(image.size[1], 120)

    def test_export_bundle_handles_empty_store(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            bundle = export_snapshot_bundle(InMemoryTaskStore(), [], out_dir=Path(tmp) / "nested")
            self.assertTrue(bundle.png_snapshot.exists())
            self.assertEqual(set(bundle.as_dict()), {"ascii_snapshot", "markdown_snapshot", "png_snapshot"})


if __name__ == "__main__":
    unittest.main()
