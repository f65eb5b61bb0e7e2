"""Tests for writing and loading the output blob."""

import io
import os
import tempfile
import unittest

from gambit.config import Settings
from gambit.etl.aggregator import DataAggregator
from gambit.etl.serializer import EVENTS_KEY, JS_PREFIX, load_blob, loads, to_blob, write_blob

PRO_GAME = "1 2000.03.14 1-0 2851 1900 4 ### W1.d4 B1.d5 W2.c4 B2.e6\n"


def sample_blob():
    agg = DataAggregator(Settings())
    agg.process_pro_data(io.StringIO(PRO_GAME))
    return to_blob(agg.counts)


class TestBlob(unittest.TestCase):

    def test_blob_shape(self):
        blob = sample_blob()
        entries = blob[EVENTS_KEY]
        self.assertEqual(entries[0], {"name": "total", "data": [1, 1, 1, 1]})
        self.assertTrue(all(set(e) == {"name", "data"} for e in entries))

    def test_script_format(self):
        blob = sample_blob()
        with tempfile.TemporaryDirectory() as tmp:
            path = write_blob(os.path.join(tmp, "data.js"), blob)
            text = path.read_text(encoding="utf-8")
            loaded = load_blob(path)

        self.assertTrue(text.startswith(JS_PREFIX))
        self.assertTrue(text.endswith(";"))
        self.assertEqual(loaded, blob)

    def test_json_format(self):
        blob = sample_blob()
        with tempfile.TemporaryDirectory() as tmp:
            path = write_blob(os.path.join(tmp, "out", "data.json"), blob)
            text = path.read_text(encoding="utf-8")
            loaded = load_blob(path)

        self.assertTrue(text.startswith("{"))
        self.assertEqual([e["name"] for e in loaded[EVENTS_KEY]], [e["name"] for e in blob[EVENTS_KEY]])

    def test_malformed_blobs(self):
        with self.assertRaises(ValueError):
            loads("not json")
        with self.assertRaises(ValueError):
            loads('{"somethingElse": []}')
        with self.assertRaises(ValueError):
            loads('{"eventsByMove": [{"name": "total"}]}')


if __name__ == "__main__":
    unittest.main()
