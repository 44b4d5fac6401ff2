import io

from loader import load_processes, write_processes
from simulator import PagingSimulator, TraceReporter, main

RECORDS = [(1, [5, 5, 9, 0]), (2, [8, 8, 63])]


def write_input(path):
    with open(path, 'wb') as f:
        write_processes(f, RECORDS)


def test_small(tmp_path, capsys):
    path = tmp_path / 'test.bin'
    write_input(path)

    for table_type in ['flat', 'two-level']:
        assert main(['-t', table_type, str(path)]) == 0
        out = capsys.readouterr().out
        lines = out.splitlines()
        assert lines[0] == "load_process() start"
        assert "simulate() start" in lines
        assert "simulate() end" in lines
        assert lines[-1].startswith("Total: Allocated Frames=")
        assert "Out of memory!!" not in out


def test_small_flat_trace_text(tmp_path):
    path = tmp_path / 'test.bin'
    write_input(path)
    with open(path, 'rb') as f:
        records = load_processes(f)

    out = io.StringIO()
    simulator = PagingSimulator(table_type='flat', reporter=TraceReporter(out=out))
    simulator.run(records)
    lines = out.getvalue().splitlines()

    # Two flat tables take frames 0-15, so the first data page lands in frame 16
    assert "[PID 01 IDX:000] 005 Page access: PF -> Allocated Frame 016" in lines
    assert "[PID 02 IDX:000] 008 Page access: PF -> Allocated Frame 017" in lines
    assert "[PID 01 IDX:001] 005 Page access: Frame 016" in lines
    assert "** Process 001: Allocated Frames=011 PageFaults/References=003/004" in lines
    assert "[PAGE] 005 -> [FRAME] 016 REF=002" in lines
    assert lines[-1] == "Total: Allocated Frames=021 Page Faults/References=005/007"


def test_small_two_level_trace_text():
    out = io.StringIO()
    simulator = PagingSimulator(table_type='two-level', reporter=TraceReporter(out=out))
    simulator.run([(1, [0, 8, 1])])
    lines = out.getvalue().splitlines()

    assert ("[PID 01 IDX:000] Page access 000: (L1PT) PF -> Allocated Frame 001(PTE 000), "
            "(L2PT) PF -> Allocated Frame 002") in lines
    assert ("[PID 01 IDX:001] Page access 008: (L1PT) PF -> Allocated Frame 003(PTE 001), "
            "(L2PT) PF -> Allocated Frame 004") in lines
    assert ("[PID 01 IDX:002] Page access 001: (L1PT) Frame 001, "
            "(L2PT) PF -> Allocated Frame 005") in lines
    assert "(L1PT) [PTE] 000 -> [FRAME] 001" in lines
    assert "(L2PT) [PAGE] 008 -> [FRAME] 004 REF=001" in lines
    assert lines[-1] == "Total: Allocated Frames=006 Page Faults/References=005/003"


def test_quiet_prints_only_totals(tmp_path, capsys):
    path = tmp_path / 'test.bin'
    write_input(path)
    assert main(['-q', str(path)]) == 0
    out = capsys.readouterr().out
    assert out.splitlines() == ["Total: Allocated Frames=021 Page Faults/References=005/007"]


def test_bad_input_exits_cleanly(tmp_path, capsys):
    path = tmp_path / 'bad.bin'
    with open(path, 'wb') as f:
        write_processes(f, [(1, [0, 64])])
    assert main([str(path)]) == 2
    assert "Invalid input: Page 64 (pid 1) out of range" in capsys.readouterr().err

    text = tmp_path / 'bad.txt'
    text.write_text("1 2 3\n")
    assert main(['--text', str(text)]) == 2
    assert "Invalid input: Line 1" in capsys.readouterr().err
