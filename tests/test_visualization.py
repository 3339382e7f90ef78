from fintrack.config import CURRENCY_SYMBOL
from fintrack.visualization import (
    create_category_bar_chart,
    create_category_pie_chart,
    create_monthly_line_chart,
)


def _chart(labels, data, **extra):
    return {'labels': labels, 'datasets': [dict(extra, data=data)]}


def test_empty_series_show_placeholder():
    for builder in (create_category_pie_chart, create_category_bar_chart, create_monthly_line_chart):
        fig = builder(_chart([], []))
        assert fig.layout.title.text == "No data to display"


def test_pie_with_only_zero_values_shows_placeholder():
    fig = create_category_pie_chart(_chart(['Food', 'Rent'], [0, 0]))
    assert fig.layout.title.text == "No data to display"


def test_pie_chart_has_one_slice_per_category():
    fig = create_category_pie_chart(_chart(['Food', 'Rent'], [30, 70]))
    assert list(fig.data[0].labels) == ['Food', 'Rent']


def test_line_chart_uses_dataset_label_and_currency_axis():
    fig = create_monthly_line_chart(
        _chart(['Jan 2024', 'Feb 2024'], [150, 200], label='Monthly Spending', borderColor='#4fd1c5')
    )
    assert fig.layout.title.text == 'Monthly Spending'
    assert fig.layout.yaxis.tickprefix == CURRENCY_SYMBOL
    assert list(fig.data[0].y) == [150, 200]
