"""Module to submit listens to ListenBrainz."""

import logging

import requests

from mpd_brainz import CLIENT_NAME, __version__
from mpd_brainz.errors import SubmissionError, SubmissionTransportError
from mpd_brainz.models import Listens, ListenType

logger = logging.getLogger("listenbrainz")

API_ROOT = "https://api.listenbrainz.org/1/"
SUBMIT_LISTENS_URL = API_ROOT + "submit-listens"
VALIDATE_TOKEN_URL = API_ROOT + "validate-token"
USER_AGENT = f"{CLIENT_NAME}/{__version__}"

# Seconds, keep it below the polling interval
REQUEST_TIMEOUT = 10


class ListenBrainzClient:
    """Authenticated access to the ListenBrainz listen submission API."""

    def __init__(
        self,
        token: str,
        url: str = SUBMIT_LISTENS_URL,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        if not token:
            raise ValueError("ListenBrainz token cannot be empty")
        self.url = url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Token {token}",
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            }
        )

    def submit(self, listens: Listens, listen_type: ListenType) -> None:
        """Submit listens under the given listen type.

        The batch passed in is left untouched: playing_now is sent from a
        derived copy with the timestamp cleared.

        Args:
            listens: Listens to submit.
            listen_type: single, playing_now or import.

        Raises:
            SubmissionError: ListenBrainz answered with anything but 200.
            SubmissionTransportError: No answer at all.

        """
        if listen_type == ListenType.PLAYING_NOW:
            listens = listens.as_playing_now()
            logger.debug(f"Submitting playing now: {listens}")
        elif listen_type == ListenType.IMPORT:
            listens = listens.retyped(listen_type)
            logger.info(f"Importing {len(listens)} listens")
        else:
            listens = listens.retyped(listen_type)
            logger.info(f"Submitting listen: {listens}")

        data = listens.to_json(indent=3)
        try:
            resp = self.session.post(self.url, data=data.encode(), timeout=self.timeout)
        except requests.RequestException as e:
            raise SubmissionTransportError(
                f"Error submitting request: {e.__class__.__name__}: {e}"
            ) from e

        if resp.status_code == requests.codes.bad_request:
            logger.debug(f"Bad request with data: {data}")
        if resp.status_code != requests.codes.ok:
            reason = _error_message(resp)
            raise SubmissionError(
                f"Error submitting request. status: {resp.status_code} {resp.reason}"
                + (f" ({reason})" if reason else ""),
                status_code=resp.status_code,
                reason=reason,
            )

    def validate_token(self) -> str | None:
        """Check the token against ListenBrainz.

        Returns:
            str | None: The user name owning the token, None if the token is
            not valid.

        """
        try:
            resp = self.session.get(VALIDATE_TOKEN_URL, timeout=self.timeout)
        except requests.RequestException as e:
            raise SubmissionTransportError(
                f"Error validating token: {e.__class__.__name__}: {e}"
            ) from e
        if resp.status_code != requests.codes.ok:
            raise SubmissionError(
                f"Error validating token. status: {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
                reason=_error_message(resp),
            )
        data = resp.json()
        if not data.get("valid"):
            logger.warning(f"Invalid ListenBrainz token: {data.get('message', '')}")
            return None
        return data.get("user_name")

    def close(self) -> None:
        self.session.close()


def _error_message(resp: requests.Response) -> str:
    """Pull the diagnostic message out of an error response, if any."""
    try:
        data = resp.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        return str(data.get("error") or "")
    return ""
