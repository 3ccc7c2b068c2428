import logging
from pathlib import Path
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow, InstalledAppFlow

from photomirror.config import SCOPES, SyncConfig
from photomirror.errors import AuthFailure

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"


class AuthManager:
    """
    Manages Google Photos API authentication: stored refresh token, cached
    token file, one-time authorization code, or the interactive local-server flow.
    Callers only ever ask for current_token().
    """

    def __init__(self, config: SyncConfig, logger_obj: Optional[logging.Logger] = None):
        self.config = config
        self.token_file = Path(config.token_file)
        self.creds = None
        self.logger = logger_obj or logging.getLogger(__name__)

    def current_token(self) -> str:
        """
        Return an access token that is valid right now, refreshing if it has expired.
        Raises AuthFailure when no usable token can be obtained.
        """
        if self.creds is None:
            self.creds = self.authenticate()

        if not self.creds.valid:
            if not self.creds.refresh_token:
                raise AuthFailure("Access token expired and no refresh token is available.")
            self._refresh(self.creds)
            self._save(self.creds)

        return self.creds.token

    def authenticate(self) -> Credentials:
        """
        Obtain credentials, trying each source in turn.
        """
        if self.config.refresh_token:
            self.logger.info("Refreshing access token from stored refresh token...")
            creds = Credentials(
                token=None,
                refresh_token=self.config.refresh_token,
                token_uri=TOKEN_URI,
                client_id=self._require("client_id"),
                client_secret=self._require("client_secret"),
                scopes=SCOPES,
            )
            self._refresh(creds)
            self._save(creds)
            return creds

        creds = self._load_token_file()
        if creds:
            if not creds.valid:
                if not creds.refresh_token:
                    raise AuthFailure(f"Cached token in {self.token_file} expired without a refresh token.")
                self._refresh(creds)
                self._save(creds)
            return creds

        if self.config.auth_code:
            creds = self._exchange_code(self.config.auth_code)
        elif self.config.interactive:
            creds = self._run_local_server()
        else:
            if self.config.client_id and self.config.client_secret:
                self.logger.info("Authorize this app by visiting this url: %s", self.authorization_url())
            raise AuthFailure(
                "No credentials available: set REFRESH_TOKEN, or CODE for a one-time "
                "authorization code, or INTERACTIVE_AUTH=true."
            )

        self._save(creds)
        return creds

    def authorization_url(self) -> str:
        """
        URL the user visits to grant read-only access and receive a one-time code.
        """
        url, _state = self._code_flow().authorization_url(access_type="offline", prompt="consent")
        return url

    # -----------------------------
    # INTERNAL HELPERS
    # -----------------------------

    def _require(self, field: str) -> str:
        value = getattr(self.config, field)
        if not value:
            raise AuthFailure(f"{field.upper()} is not configured.")
        return value

    def _client_config(self, kind: str) -> dict:
        return {
            kind: {
                "client_id": self._require("client_id"),
                "client_secret": self._require("client_secret"),
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": [self.config.redirect_uri],
            }
        }

    def _code_flow(self) -> Flow:
        # The code is obtained in an earlier, separate run, so no PKCE verifier
        # can be carried over to the exchange.
        return Flow.from_client_config(
            self._client_config("web"),
            SCOPES,
            redirect_uri=self.config.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def _refresh(self, creds: Credentials):
        try:
            creds.refresh(Request())
        except GoogleAuthError as e:
            raise AuthFailure(f"Token refresh failed: {e}") from e

    def _exchange_code(self, code: str) -> Credentials:
        flow = self._code_flow()
        try:
            flow.fetch_token(code=code)
        except Exception as e:
            raise AuthFailure(f"Authorization code exchange failed: {e}") from e

        creds = flow.credentials
        if creds.refresh_token:
            self.logger.warning(
                "Store this refresh token as REFRESH_TOKEN for later runs: %s",
                creds.refresh_token,
            )
        return creds

    def _run_local_server(self) -> Credentials:
        flow = InstalledAppFlow.from_client_config(self._client_config("installed"), SCOPES)
        try:
            return flow.run_local_server(port=0)
        except Exception as e:
            raise AuthFailure(f"Interactive authorization failed: {e}") from e

    def _load_token_file(self) -> Optional[Credentials]:
        if not self.token_file.exists():
            return None
        try:
            return Credentials.from_authorized_user_file(str(self.token_file), SCOPES)
        except OSError as e:
            raise AuthFailure(f"Cannot read token file {self.token_file}: {e}") from e
        except ValueError as e:
            self.logger.warning("Token file corrupt (%s). Re-authenticating.", e)

        try:
            self.token_file.unlink()
        except OSError as e:
            raise AuthFailure(f"Cannot remove corrupt token file {self.token_file}: {e}") from e
        return None

    def _save(self, creds: Credentials):
        try:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.token_file, "w") as token:
                token.write(creds.to_json())
        except OSError as e:
            self.logger.warning("Could not write token file %s: %s", self.token_file, e)
