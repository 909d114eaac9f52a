import os
import webbrowser
from typing import Optional

import httpx
import typer
from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))

app = typer.Typer(add_completion=False)

API_URL = os.environ.get("BACKEND_URL", "http://localhost:8888").rstrip("/")
HTTP_TIMEOUT = float(os.environ.get("RELAY_HTTP_TIMEOUT", "10.0"))


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and payload.get("detail"):
        return str(payload["detail"])
    return response.text


def _request_refresh(refresh_token: str) -> httpx.Response:
    try:
        return httpx.get(
            f"{API_URL}/refresh_token",
            params={"refresh_token": refresh_token},
            timeout=HTTP_TIMEOUT,
        )
    except httpx.RequestError as exc:
        typer.echo(f"Unable to reach relay: {exc}")
        raise typer.Exit(1)


@app.command()
def login(open_browser: bool = typer.Option(True, help="Open the login page in the default browser.")):
    """
    Start the Spotify login flow in a browser.
    """
    login_url = f"{API_URL}/login"
    typer.echo(f"Open the following link in a browser to continue:\n{login_url}")
    if not open_browser:
        return
    try:
        webbrowser.open(login_url)
    except webbrowser.Error:
        typer.echo("Unable to open browser automatically. Please open the link manually.")


@app.command()
def refresh(refresh_token: str, as_json: bool = typer.Option(False, "--json", help="Print the raw response.")):
    """
    Exchange a refresh token for a new access token.
    """
    response = _request_refresh(refresh_token)
    if response.status_code != 200:
        typer.echo(f"Refresh failed ({response.status_code}): {_error_detail(response)}")
        raise typer.Exit(1)
    payload = response.json()
    access_token: Optional[str] = payload.get("access_token")
    if not access_token:
        typer.echo("Refresh response missing access_token.")
        raise typer.Exit(1)
    typer.echo(response.text if as_json else access_token)


@app.command()
def ping():
    """
    Check relay health status.
    """
    try:
        response = httpx.get(f"{API_URL}/healthz", timeout=HTTP_TIMEOUT)
    except httpx.RequestError as exc:
        typer.echo(f"Unable to reach relay: {exc}")
        raise typer.Exit(1)

    if response.status_code == 200:
        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if payload.get("ok") is True:
            typer.echo("Relay healthy.")
            return
        typer.echo(f"Relay responded with unexpected payload: {payload}")
        raise typer.Exit(1)

    typer.echo(f"Unexpected response ({response.status_code}): {response.text}")
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
