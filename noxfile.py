import os

import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]
SUITE = "tests/storefront"

nox.options.sessions = ["tests"]


def _install(session: nox.Session, postgres: bool = False) -> None:
    """Install the storefront and its test group into the nox virtualenv."""
    args = ["poetry", "install", "--with", "test"]
    if postgres:
        args += ["--extras", "postgresql"]
    session.run(*args, external=True)
    if postgres:
        # psycopg2 ships a compiled extension; rebuild it for this interpreter.
        session.run("pip", "install", "--force-reinstall", "--no-cache-dir", "psycopg2-binary")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Full storefront suite on in-memory providers."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
@nox.parametrize("layer", ["domain", "application", "integration", "bdd"])
def layer(session: nox.Session, layer: str) -> None:
    """One test layer at a time, e.g. ``nox -s "layer(layer='domain')"``."""
    _install(session)
    session.run("pytest", f"{SUITE}/{layer}/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def postgres(session: nox.Session) -> None:
    """Checkout flows against PostgreSQL; needs DATABASE_URL."""
    if not os.environ.get("DATABASE_URL"):
        session.skip("DATABASE_URL is not set")
    _install(session, postgres=True)
    session.env["PROTEAN_ENV"] = "production"
    session.run("python", "src/manage.py", "setup-db")
    try:
        session.run("pytest", "--env", "production", f"{SUITE}/application/", f"{SUITE}/integration/")
    finally:
        session.run("python", "src/manage.py", "drop-db")
