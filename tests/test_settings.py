from fintrack.settings import get_config_value, get_report_config


def test_report_config_loads():
    config = get_report_config()
    assert config['pdf']['title'] == 'FinTrack Expense Report'
    assert config['insights']['transaction_count'] == 50


def test_get_config_value_defaults():
    assert get_config_value('reports', 'pdf', 'header_rgb') == [79, 209, 197]
    assert get_config_value('reports', 'pdf', 'missing', default='x') == 'x'
    assert get_config_value('no_such_file', 'a', default=1) == 1
