import matplotlib.pyplot as plt
import pytest
from matplotlib.figure import Figure

from services.aggregates import AnalyticsPeriod
from services.chart_service import ChartService


def test_no_chart_without_spend(make_record):
    service = ChartService()
    assert service.generate_category_chart([]) is None
    assert service.generate_category_chart([make_record(is_active=False)]) is None


def test_chart_is_png(make_record):
    records = [make_record(), make_record(name="Gym", price="30")]

    buf = ChartService("€").generate_category_chart(records, AnalyticsPeriod.YEAR)

    assert buf.getvalue().startswith(b"\x89PNG")
    assert plt.get_fignums() == []


def test_figure_is_closed_when_rendering_fails(make_record, monkeypatch):
    def broken_savefig(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(Figure, "savefig", broken_savefig)

    with pytest.raises(OSError):
        ChartService().generate_category_chart([make_record()])
    assert plt.get_fignums() == []
