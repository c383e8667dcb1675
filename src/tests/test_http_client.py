"""
Test suite for HTTPClient component
Following TDD approach with AAA pattern and descriptive naming
"""

import logging
from concurrent.futures import Future
from unittest.mock import Mock, patch

import pytest
import requests
from rest_adapter.http_client import HTTPClient, APIRequest, RawResponse, basic_credential
from rest_adapter.exceptions import TransportError


def _mock_response(status_code=200, content=b'{"data": "test"}', headers=None):
    response = Mock()
    response.status_code = status_code
    response.content = content
    response.headers = headers if headers is not None else {'Content-Type': 'application/json'}
    return response


class TestHTTPClientAuthentication:
    """Test suite for authentication header construction"""

    def test_authenticate_with_bearer_token_sets_authorization_header(self):
        """
        Test that bearer token authentication sets the Authorization header
        """
        # Arrange
        http_client = HTTPClient()

        # Act
        http_client.authenticate({'type': 'bearer_token', 'token': 'abc123'})

        # Assert
        assert http_client.headers['Authorization'] == 'Bearer abc123'

    def test_authenticate_with_basic_credentials_sets_basic_header(self):
        """
        Test that basic authentication encodes username and password
        """
        # Arrange
        http_client = HTTPClient()

        # Act
        http_client.authenticate({'type': 'basic', 'username': 'user', 'password': 'pass'})

        # Assert
        assert http_client.headers['Authorization'] == 'Basic dXNlcjpwYXNz'

    def test_authenticate_with_api_key_sets_api_key_header(self):
        """
        Test that API key authentication uses its own header
        """
        # Arrange
        http_client = HTTPClient()

        # Act
        http_client.authenticate({'type': 'api_key', 'api_key': 'key_123'})

        # Assert
        assert http_client.headers['X-API-Key'] == 'key_123'
        assert 'Authorization' not in http_client.headers

    def test_authenticate_with_unsupported_type_raises_value_error(self):
        """
        Test that unsupported authentication type raises ValueError
        """
        # Arrange
        http_client = HTTPClient()

        # Act & Assert
        with pytest.raises(ValueError) as exc_info:
            http_client.authenticate({'type': 'oauth_dance'})

        assert "Unsupported authentication type" in str(exc_info.value)

    def test_basic_credential_matches_http_basic_format(self):
        """
        Test the Basic credential string for a known pair
        """
        # Act & Assert
        assert basic_credential('Aladdin', 'open sesame') == 'Basic QWxhZGRpbjpvcGVuIHNlc2FtZQ=='


class TestHTTPClientExecute:
    """Test suite for synchronous request execution"""

    def test_execute_with_successful_response_returns_raw_response(self):
        """
        Test that a completed request returns status, headers and body bytes
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = _mock_response(
            headers={'Content-Type': 'application/json', 'X-RateLimit-Remaining': '95'}
        )

        http_client = HTTPClient(timeout=5.0)
        http_client.session = mock_session
        request = APIRequest(url='https://api.test.com/users', parameters={'page': 2})

        # Act
        result = http_client.execute(request)

        # Assert
        assert isinstance(result, RawResponse)
        assert result.status_code == 200
        assert result.body == b'{"data": "test"}'
        assert result.headers['X-RateLimit-Remaining'] == '95'
        assert result.headers['x-ratelimit-remaining'] == '95'

        call_args = mock_session.request.call_args
        assert call_args[0] == ('GET', 'https://api.test.com/users')
        assert call_args[1]['params'] == {'page': 2}
        assert call_args[1]['timeout'] == 5.0
        assert call_args[1]['verify'] is True

    def test_execute_with_error_status_returns_response_without_raising(self):
        """
        Test that non-2xx responses are returned for later validation
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = _mock_response(status_code=404, content=b'{}')

        http_client = HTTPClient()
        http_client.session = mock_session

        # Act
        result = http_client.execute(APIRequest(url='https://api.test.com/users/23'))

        # Assert
        assert result.status_code == 404

    def test_execute_with_no_content_returns_empty_body(self):
        """
        Test that a missing body is treated as an empty byte sequence
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = _mock_response(status_code=204, content=None)

        http_client = HTTPClient()
        http_client.session = mock_session

        # Act
        result = http_client.execute(APIRequest(url='https://api.test.com/users/2', method='DELETE'))

        # Assert
        assert result.body == b""
        assert result.text == ""

    def test_execute_with_network_failure_raises_transport_error(self):
        """
        Test that transport failures surface as TransportError, not a status code
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.side_effect = requests.exceptions.ConnectionError("connection refused")

        http_client = HTTPClient()
        http_client.session = mock_session

        # Act & Assert
        with pytest.raises(TransportError) as exc_info:
            http_client.execute(APIRequest(url='https://api.test.com/users'))

        assert exc_info.value.url == 'https://api.test.com/users'
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

    def test_execute_merges_authentication_and_request_headers(self):
        """
        Test that authentication headers are sent alongside request headers
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = _mock_response()

        http_client = HTTPClient()
        http_client.session = mock_session
        http_client.authenticate({'type': 'bearer_token', 'token': 'tok'})

        request = APIRequest(
            url='https://api.test.com/users',
            method='POST',
            headers={'Content-Type': 'application/json'},
            body=b'{"name": "morpheus"}'
        )

        # Act
        http_client.execute(request)

        # Assert
        call_args = mock_session.request.call_args
        assert call_args[0][0] == 'POST'
        assert call_args[1]['headers'] == {
            'Authorization': 'Bearer tok',
            'Content-Type': 'application/json'
        }
        assert call_args[1]['data'] == b'{"name": "morpheus"}'

    @patch('requests.Session')
    def test_execute_creates_session_on_first_use(self, mock_session_class):
        """
        Test that the session is created lazily and reused
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = _mock_response()
        mock_session_class.return_value = mock_session

        http_client = HTTPClient()

        # Act
        http_client.execute(APIRequest(url='https://api.test.com/a'))
        http_client.execute(APIRequest(url='https://api.test.com/b'))

        # Assert
        mock_session_class.assert_called_once()
        assert mock_session.request.call_count == 2

    def test_verify_ssl_disabled_is_passed_to_session_and_logged(self, caplog):
        """
        Test that trust-all TLS is an explicit opt-in with a warning
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = _mock_response()

        # Act
        with caplog.at_level(logging.WARNING, logger='rest_adapter.http_client'):
            http_client = HTTPClient(verify_ssl=False)
        http_client.session = mock_session
        http_client.execute(APIRequest(url='https://self-signed.test.com/'))

        # Assert
        assert mock_session.request.call_args[1]['verify'] is False
        assert "verification is disabled" in caplog.text


class TestHTTPClientExecuteAsync:
    """Test suite for asynchronous request execution"""

    def test_execute_async_returns_future_resolving_to_response(self):
        """
        Test that asynchronous execution resolves to the same RawResponse shape
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = _mock_response(status_code=201)

        http_client = HTTPClient(max_workers=2)
        http_client.session = mock_session

        # Act
        future = http_client.execute_async(APIRequest(url='https://api.test.com/users'))
        result = future.result(timeout=5)

        # Assert
        assert isinstance(future, Future)
        assert result.status_code == 201
        http_client.close_connection()

    def test_execute_async_with_network_failure_raises_from_result(self):
        """
        Test that transport failures propagate through the future
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.side_effect = requests.exceptions.Timeout("read timed out")

        http_client = HTTPClient()
        http_client.session = mock_session

        # Act
        future = http_client.execute_async(APIRequest(url='https://api.test.com/users'))

        # Assert
        with pytest.raises(TransportError):
            future.result(timeout=5)
        http_client.close_connection()


class TestHTTPClientClose:
    """Test suite for releasing resources"""

    def test_close_connection_with_active_session_closes_successfully(self):
        """
        Test that closing connection properly cleans up session and workers
        """
        # Arrange
        http_client = HTTPClient()
        mock_session = Mock()
        http_client.session = mock_session
        executor = http_client._get_executor()

        # Act
        http_client.close_connection()

        # Assert
        mock_session.close.assert_called_once()
        assert http_client.session is None
        assert executor._shutdown

    def test_close_connection_with_no_session_handles_gracefully(self):
        """
        Test that closing connection when no session exists doesn't raise error
        """
        # Arrange
        http_client = HTTPClient()

        # Act & Assert - should not raise any exceptions
        http_client.close_connection()

    def test_context_manager_closes_connection_on_exit(self):
        """
        Test that the client can be used as a context manager
        """
        # Arrange
        mock_session = Mock()

        # Act
        with HTTPClient() as http_client:
            http_client.session = mock_session

        # Assert
        mock_session.close.assert_called_once()
