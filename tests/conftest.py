"""
Pytest configuration and shared fixtures.
"""

from typing import Dict, List, Optional

import pyarrow as pa
import pytest

from table_diff_checker import config
from table_diff_checker.row_stream import RowStream


def make_batch(columns: Dict[str, list], types: Optional[Dict[str, pa.DataType]] = None) -> pa.RecordBatch:
    """Build a record batch from column name -> values, with optional explicit types."""
    types = types or {}
    arrays = [pa.array(values, type=types.get(name)) for name, values in columns.items()]
    return pa.RecordBatch.from_arrays(arrays, names=list(columns))


class RecordingStreamFactory:
    """Stream factory that remembers every stream it builds and every pull made."""

    def __init__(self):
        self.streams: List[RowStream] = []
        self.next_row_calls = 0

    def __call__(self, batches):
        factory = self

        class CountingRowStream(RowStream):
            def next_row(self):
                factory.next_row_calls += 1
                return super().next_row()

        stream = CountingRowStream(batches)
        self.streams.append(stream)
        return stream


@pytest.fixture
def recording_factory():
    """A fresh stream factory that counts next_row calls."""
    return RecordingStreamFactory()


@pytest.fixture
def people_batches():
    """Two batches of (id, name, score) rows, five rows in total."""
    types = {"id": pa.int64(), "name": pa.string(), "score": pa.float64()}
    return [
        make_batch({"id": [1, 2, 3], "name": ["a", "b", None], "score": [1.5, 2.5, 3.5]}, types),
        make_batch({"id": [4, 5], "name": ["d", "e"], "score": [4.5, None]}, types),
    ]


@pytest.fixture
def csv_file(tmp_path):
    """Small CSV file with a header row."""
    path = tmp_path / "people.csv"
    path.write_text("id,name,score\n1,a,1.5\n2,b,2.5\n3,c,3.5\n")
    return path


@pytest.fixture
def local_config(monkeypatch):
    """Replace the values loaded from .table-diff.json for one test."""
    values = {}
    monkeypatch.setattr(config, "_LOCAL_CONFIG", values)
    return values
