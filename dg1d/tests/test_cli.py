"""
Pytest tests for the command-line driver and plotting.
"""

import json
import matplotlib
import pytest
import sys
from pathlib import Path

matplotlib.use('Agg')

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from dg1d.cli import main
from dg1d.src import Solver1D, SolverConfig


class TestRun:

    def test_run_writes_output(self, tmp_path, capsys):
        output = tmp_path / "result.json"
        code = main(["run", "--test-case", "sine", "-k", "2", "--cells", "10",
                     "--final-time", "0.1", "--output", str(output)])

        assert code == 0
        data = json.loads(output.read_text())
        assert data['completed'] is True
        assert data['time'] == 0.1
        assert data['config']['n_cells'] == 10
        assert data['errors'][0]['l2'] < 1e-2
        assert "L2 =" in capsys.readouterr().out

    def test_run_from_config_file(self, tmp_path, capsys):
        config_path = tmp_path / "sod.json"
        SolverConfig(test_case='sod', degree=1, n_cells=40, limiter='minmod',
                     final_time=0.05).to_json(config_path)
        plot_path = tmp_path / "sod.png"

        code = main(["run", "--config", str(config_path), "--flux", "roe", "--plot", str(plot_path)])

        assert code == 0
        assert plot_path.exists()
        assert capsys.readouterr().out.startswith("sod:")

    def test_configuration_error_exit_code(self, capsys):
        code = main(["run", "--test-case", "sine", "-k", "-2"])
        assert code == 1
        assert "degree" in capsys.readouterr().err

    def test_unknown_config_key(self, tmp_path):
        config_path = tmp_path / "bad.json"
        config_path.write_text(json.dumps({'order': 2}))
        assert main(["run", "--config", str(config_path)]) == 1


class TestConvergence:

    def test_table(self, capsys):
        code = main(["convergence", "--test-case", "sine", "-k", "1", "--final-time", "0.2",
                     "--cells", "8", "16", "32"])
        assert code == 0

        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[0].split() == ['cells', 'dofs', 'L2', 'rate', 'Linf', 'rate']
        assert len(lines) == 4
        assert lines[1].split()[3] == '-'
        assert float(lines[3].split()[3]) > 1.5


class TestPlot:

    @pytest.mark.parametrize("test_case", ['sine', 'density_wave', 'shu_osher'])
    def test_plot_solution(self, tmp_path, test_case):
        solver = Solver1D(SolverConfig(test_case=test_case, n_cells=20, final_time=0.01,
                                       limiter='minmod', print_interval=0))
        solver.set_initial_condition()
        solver.solve()
        filename = tmp_path / f"{test_case}.png"
        solver.plot_solution(filename)
        assert filename.exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
