import pytest
import numpy as np
from lmp2trr import pipeline
from lmp2trr.io.parser import open_dump
from lmp2trr.pipeline import DumpConverter
from lmp2trr.core.errors import (InputOpenError, OutputOpenError, SchemaIncompleteError,
                                 AtomCountChangedError, SinkWriteError)

from conftest import TWO_ATOM_LINES, make_frame


@pytest.fixture
def dump_file(tmp_path):
    def _write(text, name="traj.dump"):
        path = tmp_path / name
        path.write_text(text)
        return path
    return _write


def test_reference_scenario(dump_file, two_atom_dump, memory_sink, tmp_path):
    converter = DumpConverter(dump_file(two_atom_dump), tmp_path / "out.trr",
                              timestep=0.001, sink_factory=memory_sink)
    summary = converter.run()

    assert summary.frames_written == 1
    assert summary.frames_skipped == 0
    assert summary.n_atoms == 2
    sink = memory_sink.instances[0]
    assert sink.closed
    frame = sink.frames[0]
    assert frame['step'] == 100
    assert frame['time'] == pytest.approx(0.1)
    assert frame['lambda'] == 0.0
    np.testing.assert_allclose(frame['box'], np.eye(3))
    np.testing.assert_allclose(frame['positions'], [[0.1, 0.2, 0.3], [0.9, 0.8, 0.7]])
    np.testing.assert_allclose(frame['velocities'], [[10, 20, 30], [-10, -20, -30]])


def test_all_frames_written_in_order(dump_file, three_frame_dump, memory_sink, tmp_path):
    summary = DumpConverter(dump_file(three_frame_dump), tmp_path / "out.trr",
                            sink_factory=memory_sink).run()
    frames = memory_sink.instances[0].frames
    assert summary.frames_written == 3
    assert [f['step'] for f in frames] == [0, 10, 20]
    np.testing.assert_allclose(np.diag(frames[1]['box']), [1.0, 2.0, 0.2])
    np.testing.assert_allclose(frames[1]['positions'][0], [0.65, 0.25, 0.25])


def test_first_frame_is_replayed_not_lost(dump_file, two_atom_dump, memory_sink, tmp_path):
    """Lines read during discovery are still converted."""
    DumpConverter(dump_file(two_atom_dump), tmp_path / "out.trr", sink_factory=memory_sink).run()
    assert len(memory_sink.instances[0].frames) == 1


def test_gzip_input(tmp_path, two_atom_dump, memory_sink):
    import gzip
    path = tmp_path / "traj.dump.gz"
    with gzip.open(path, "wt") as f:
        f.write(two_atom_dump)
    summary = DumpConverter(path, tmp_path / "out.trr", sink_factory=memory_sink).run()
    assert summary.frames_written == 1


def test_zero_atoms(dump_file, memory_sink, tmp_path):
    text = make_frame(0, []) + make_frame(1, [])
    summary = DumpConverter(dump_file(text), tmp_path / "out.trr", sink_factory=memory_sink).run()
    assert summary.frames_written == 2
    assert summary.n_atoms == 0
    assert memory_sink.instances[0].frames[0]['positions'].shape == (0, 3)


def test_malformed_frame_is_skipped(dump_file, memory_sink, tmp_path):
    text = "".join([
        make_frame(0, TWO_ATOM_LINES),
        make_frame(1, ["1 1 1.0 2.0", TWO_ATOM_LINES[1]]),
        make_frame(2, TWO_ATOM_LINES),
    ])
    summary = DumpConverter(dump_file(text), tmp_path / "out.trr", sink_factory=memory_sink).run()
    assert summary.frames_written == 2
    assert summary.frames_skipped == 1
    assert [f['step'] for f in memory_sink.instances[0].frames] == [0, 2]


def test_missing_input(tmp_path, memory_sink):
    converter = DumpConverter(tmp_path / "nope.dump", tmp_path / "out.trr", sink_factory=memory_sink)
    with pytest.raises(InputOpenError):
        converter.run()
    assert memory_sink.instances == []


def test_incomplete_schema_does_not_open_sink(dump_file, memory_sink, tmp_path):
    path = dump_file("ITEM: TIMESTEP\n0\nITEM: NUMBER OF ATOMS\n2\n")
    with pytest.raises(SchemaIncompleteError):
        DumpConverter(path, tmp_path / "out.trr", sink_factory=memory_sink).run()
    assert memory_sink.instances == []


def test_changed_atom_count_is_fatal(dump_file, memory_sink, tmp_path):
    text = make_frame(0, TWO_ATOM_LINES) + make_frame(1, TWO_ATOM_LINES[:1])
    with pytest.raises(AtomCountChangedError):
        DumpConverter(dump_file(text), tmp_path / "out.trr", sink_factory=memory_sink).run()
    assert memory_sink.instances[0].closed


def test_sink_failure_reports_frame_index(dump_file, three_frame_dump, tmp_path):
    class FailingSink:
        instance = None

        def __init__(self, path):
            self.calls = 0
            self.closed = False
            FailingSink.instance = self

        def write_frame(self, frame):
            self.calls += 1
            if self.calls == 2:
                raise SinkWriteError("disk full")

        def close(self):
            self.closed = True

    converter = DumpConverter(dump_file(three_frame_dump), tmp_path / "out.trr", sink_factory=FailingSink)
    with pytest.raises(SinkWriteError) as exc_info:
        converter.run()
    assert exc_info.value.frame_index == 1
    assert FailingSink.instance.closed


@pytest.fixture
def opened_streams(monkeypatch):
    """Input streams handed out by the driver's dump opener."""
    streams = []

    def tracking_open_dump(path):
        stream = open_dump(path)
        streams.append(stream)
        return stream

    monkeypatch.setattr(pipeline, "open_dump", tracking_open_dump)
    return streams


def test_success_closes_input(dump_file, two_atom_dump, memory_sink, tmp_path, opened_streams):
    DumpConverter(dump_file(two_atom_dump), tmp_path / "out.trr", sink_factory=memory_sink).run()
    assert len(opened_streams) == 1
    assert opened_streams[0].closed
    assert memory_sink.instances[0].closed


def test_output_open_failure_closes_input(dump_file, two_atom_dump, tmp_path, opened_streams):
    def refuse(path):
        raise OutputOpenError("read-only", path=str(path))

    with pytest.raises(OutputOpenError):
        DumpConverter(dump_file(two_atom_dump), tmp_path / "out.trr", sink_factory=refuse).run()
    assert len(opened_streams) == 1
    assert opened_streams[0].closed


def test_sink_write_failure_closes_input(dump_file, two_atom_dump, tmp_path, opened_streams):
    class BrokenSink:
        def __init__(self, path):
            self.closed = False

        def write_frame(self, frame):
            raise SinkWriteError("no space left on device")

        def close(self):
            self.closed = True

    with pytest.raises(SinkWriteError) as exc_info:
        DumpConverter(dump_file(two_atom_dump), tmp_path / "out.trr", sink_factory=BrokenSink).run()
    assert exc_info.value.frame_index == 0
    assert opened_streams[0].closed


@pytest.mark.parametrize("kwargs, error_message_part", [
    ({"timestep": 0.0}, "timestep must be positive"),
    ({"units": "lj"}, "Unsupported LAMMPS units"),
    ({"column_policy": "fuzzy"}, "Unknown column matching policy"),
])
def test_invalid_settings(tmp_path, kwargs, error_message_part):
    with pytest.raises(ValueError, match=error_message_part):
        DumpConverter(tmp_path / "in.dump", tmp_path / "out.trr", **kwargs)


def test_trr_output_is_reproducible(dump_file, three_frame_dump, tmp_path):
    path = dump_file(three_frame_dump)
    first = tmp_path / "a.trr"
    second = tmp_path / "b.trr"
    DumpConverter(path, first).run()
    DumpConverter(path, second).run()
    assert first.read_bytes() == second.read_bytes()
    assert first.stat().st_size > 0
