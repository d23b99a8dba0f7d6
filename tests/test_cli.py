"""
Test suite for the sunlight-api command line interface
"""

import json
from unittest.mock import Mock, patch

import pytest
import requests

from sunlight_api import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", Mock())
    monkeypatch.setenv("SUNLIGHT_API_KEY", "env-key")


def make_session(*bodies):
    responses = []
    for body in bodies:
        response = Mock()
        response.json.return_value = body
        responses.append(response)

    session = Mock()
    session.get.side_effect = responses
    return session


class TestArgumentParsing:
    """Test suite for argument helpers"""

    @pytest.mark.parametrize("expression, expected", [
        ("congress=113", ("congress", 113, None)),
        ("zip=02139", ("zip", "02139", None)),
        ("bill_id=+7", ("bill_id", "+7", None)),
        ("introduced_on:gte=2013-01-01", ("introduced_on", "2013-01-01", "gte")),
        ("history.enacted=true", ("history.enacted", True, None)),
        ("sponsor_id:in=A1|B2", ("sponsor_id", "A1|B2", "in")),
    ])
    def test_parse_filter_splits_field_operator_and_value(self, expression, expected):
        """
        Test FIELD[:OP]=VALUE parsing
        """
        # Act
        result = cli.parse_filter(expression)

        # Assert
        assert result == expected

    def test_parse_filter_without_equals_raises_argument_type_error(self):
        """
        Test malformed filter expressions
        """
        # Act & Assert
        with pytest.raises(Exception) as exc_info:
            cli.parse_filter("congress")

        assert "FIELD[:OPERATOR]=VALUE" in str(exc_info.value)

    def test_parse_order_defaults_to_descending(self):
        """
        Test FIELD[:DIR] parsing
        """
        # Act & Assert
        assert cli.parse_order("introduced_on") == ("introduced_on", "desc")
        assert cli.parse_order("last_name:asc") == ("last_name", "asc")


class TestMain:
    """Test suite for cli.main"""

    @patch('requests.Session')
    def test_main_with_query_options_prints_envelope_and_returns_zero(self, mock_session_class, capsys):
        """
        Test that options are translated into one request and the result printed
        """
        # Arrange
        session = make_session({'results': [{'bill_id': 'hr1-113'}], 'count': 1, 'page': {'page': 1}})
        mock_session_class.return_value = session

        # Act
        exit_code = cli.main([
            'congress', 'bills',
            '--filter', 'congress=113',
            '--order', 'introduced_on:asc',
            '--fields', 'bill_id', 'official_title',
            '--page', '2', '--per-page', '50'
        ])

        # Assert
        assert exit_code == 0
        endpoint = session.get.call_args[0][0]
        assert endpoint == (
            "https://congress.api.sunlightfoundation.com/bills/?congress=113"
            "&order=introduced_on__asc&fields=bill_id&fields=official_title"
            "&per_page=50&page=2&apikey=env-key"
        )
        output = json.loads(capsys.readouterr().out)
        assert output['results'] == [{'bill_id': 'hr1-113'}]
        assert output['request'] == {'status': 'success'}
        session.close.assert_called_once()

    @patch('requests.Session')
    def test_main_with_zero_padded_filter_keeps_leading_zeros(self, mock_session_class):
        """
        Test that ZIP codes reach the endpoint unchanged
        """
        # Arrange
        session = make_session({'results': []})
        mock_session_class.return_value = session

        # Act
        exit_code = cli.main(['congress', 'legislators_locate', '--filter', 'zip=02139'])

        # Assert
        assert exit_code == 0
        endpoint = session.get.call_args[0][0]
        assert endpoint.startswith("https://congress.api.sunlightfoundation.com/legislators/locate/?zip=02139&")

    @patch('requests.Session')
    def test_main_with_pages_fetches_consecutive_pages(self, mock_session_class):
        """
        Test that --pages walks pages with next()
        """
        # Arrange
        session = make_session({'results': []}, {'results': []}, {'results': []})
        mock_session_class.return_value = session

        # Act
        exit_code = cli.main(['congress', 'votes', '--pages', '3'])

        # Assert
        assert exit_code == 0
        pages = [call[0][0].split('page=')[1].split('&')[0] for call in session.get.call_args_list]
        assert pages == ['1', '2', '3']

    @patch('requests.Session')
    def test_main_with_status_requests_base_url(self, mock_session_class):
        """
        Test the --status probe
        """
        # Arrange
        session = make_session({'status': 200})
        mock_session_class.return_value = session

        # Act
        exit_code = cli.main(['party_time', '--status'])

        # Assert
        assert exit_code == 0
        assert session.get.call_args[0][0] == "http://politicalpartytime.org/api/v1/"

    @patch('requests.Session')
    def test_main_with_transport_error_returns_one(self, mock_session_class, capsys):
        """
        Test that failure deliveries set a non-zero exit code
        """
        # Arrange
        session = Mock()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        mock_session_class.return_value = session

        # Act
        exit_code = cli.main(['party_time', 'event', '42'])

        # Assert
        assert exit_code == 1
        assert session.get.call_args[0][0].startswith("http://politicalpartytime.org/api/v1/event/42/?")
        assert '"status": "error"' in capsys.readouterr().err

    @pytest.mark.parametrize("argv", [
        ['congress', 'bills', '--filter', 'age:bogus=5'],
        ['congress', 'bills_search', '--search', '"a"~x'],
        ['congress', 'bills', '--highlight'],
        ['congress', 'amendments'],
        ['openstates', 'bills'],
        ['congress'],
    ])
    @patch('requests.Session')
    def test_main_with_invalid_usage_returns_two_without_request(self, mock_session_class, argv):
        """
        Test that misuse is reported before any network access
        """
        # Act
        exit_code = cli.main(argv)

        # Assert
        assert exit_code == 2
        mock_session_class.assert_not_called()

    def test_main_without_api_key_returns_two(self, monkeypatch):
        """
        Test that a missing API key is reported
        """
        # Arrange
        monkeypatch.delenv("SUNLIGHT_API_KEY")

        # Act
        exit_code = cli.main(['congress', 'votes'])

        # Assert
        assert exit_code == 2
