import os
from datetime import datetime
from pathlib import Path

from packaging.version import Version
from setuptools import setup

BASE_VERSION = Version("0.1.0")


def get_version_metadata() -> tuple[str, dict[str, str]]:
    """
    Generate the package version string and associated metadata based on
    environment variables and the current build context.
    The function determines the version and metadata as follows:
    - Reads the build type from the ``TYPESHIFT_BUILD_TYPE`` environment variable
      (defaults to "dev").
    - Reads the build iteration from the ``TYPESHIFT_BUILD_ITERATION`` environment
      variable, or falls back to 0.

    The package version string is then constructed based on the build type:
    - If release then set to the base version.
    - If candidate then set to ``{base_version}.rc{build_iteration}``.
    - If nightly or alpha then set to ``{base_version}.a{build_iteration}``.
    - For dev (or anything else) set to ``{base_version}.dev{build_iteration}``.

    The metadata dictionary includes:
    - "version": The computed package version string.
    - "base_version": The base version string.
    - "build_type": The build type used for this build.
    - "build_iteration": The build iteration value.
    - "build_date": The current date in YYYY-MM-DD format.

    :returns: A tuple containing the package version string and a dictionary of metadata
    """

    build_type = os.getenv("TYPESHIFT_BUILD_TYPE", "dev").lower()
    build_iteration = os.getenv("TYPESHIFT_BUILD_ITERATION") or 0

    if build_type == "release":
        package_version = str(BASE_VERSION)
    elif build_type == "candidate":
        package_version = f"{BASE_VERSION}.rc{build_iteration}"
    elif build_type in ["nightly", "alpha"]:
        package_version = f"{BASE_VERSION}.a{build_iteration}"
    else:
        package_version = f"{BASE_VERSION}.dev{build_iteration}"

    metadata = {
        "version": f'"{package_version}"',
        "base_version": f'"{BASE_VERSION}"',
        "build_type": f'"{build_type}"',
        "build_iteration": f'"{build_iteration}"',
        "build_date": f'"{datetime.now().strftime("%Y-%m-%d")}"',
    }

    return package_version, metadata


def write_module_version() -> str:
    """
    Utilizes the `get_version_metadata` function to generate the package version string
    and associated metadata, and writes them to the version.py file within the
    src/typeshift directory.

    :returns: The package version string
    """

    version, metadata = get_version_metadata()
    metadata_path = Path(__file__).parent / "src" / "typeshift" / "version.py"

    with metadata_path.open("w") as file:
        file.writelines([f"{key} = {value}\n" for key, value in metadata.items()])

    return version


setup(version=write_module_version())
