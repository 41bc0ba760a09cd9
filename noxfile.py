import nox

# By default just run these basic lint jobs and the tests
nox.options.sessions = ["black", "ruff", "mypy", "tests"]

SOURCES = ["ssmi_atmosphere/", "tests/"]


@nox.session
def black(session: nox.Session) -> None:
    """Check if black needs to be run"""
    session.install("black")
    session.run("black", "--check", "--diff", *SOURCES)


@nox.session
def ruff(session: nox.Session) -> None:
    """Run ruff"""
    session.install("ruff")
    session.run("ruff", "check", *SOURCES)


@nox.session
def mypy(session: nox.Session) -> None:
    """Run mypy"""
    session.install("mypy", "numpy", "netCDF4")
    session.run(
        "mypy",
        "--pretty",
        "--show-error-context",
        "ssmi_atmosphere/",
    )


@nox.session
def tests(session: nox.Session) -> None:
    """Run the test suite"""
    session.install(".[test]")
    session.run("pytest", "tests/", *session.posargs)


@nox.session
def pdoc(session: nox.Session) -> None:
    """Run pdoc and save output

    The package is installed locally before pdoc imports it.

    ```
    nox -s pdoc
    ```
    """
    session.install(".")
    session.install("pdoc")
    session.run("pdoc", "ssmi_atmosphere", "--output-directory", "public")
