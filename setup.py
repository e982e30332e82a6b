from setuptools import find_packages, setup


def read(path):
    # type: (str) -> str
    with open(path, "rt", encoding="utf8") as f:
        return f.read().strip()


setup(
    name="gamecord",
    version="1.0.0",
    author="Gamecord contributors",
    author_email="gamecord@users.noreply.github.com",
    url="https://github.com/gamecord/gamecord",
    license="GPL-3.0 License",
    packages=find_packages(exclude=("tests", "tests.*")),
    description="Mini-games for Discord conversations.",
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    python_requires=">=3.10.0",
    classifiers=[
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: MacOS",
        "Operating System :: POSIX :: Linux",
    ],
    keywords=["discord", "bot", "games", "minigames"],
    install_requires=read("requirements.txt").split("\n"),
    extras_require={
        "test": ["pytest>=7.0", "pytest-asyncio>=0.23"],
    },
    platforms="any",
    include_package_data=True,
    package_data={
        "gamecord": [
            "py.typed",
            "resources/config.example.yml",
            "resources/logging.conf",
            "resources/words.txt",
        ],
    },
    entry_points={
        "console_scripts": [
            "gamecord=gamecord.cli:entrypoint",
        ]
    },
)
