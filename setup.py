import setuptools
from setuptools import find_packages

with open("readme.md", "r") as fh:
    long_description = fh.read()


vars2find = ["__author__", "__version__", "__url__"]
vars2readme = {}
with open("./sitedesk/__init__.py") as f:
    for line in f.readlines():
        for v in vars2find:
            if line.startswith(v):
                line = line.replace(" ", "").replace('"', "").replace("'", "").strip()
                vars2readme[v] = line.split("=")[1]

core_deps = [
    "pydantic>=2.0",
    "python-dotenv",
    "aioboto3",
    "redis[hiredis]>=5.0.1",
]

api_deps = [
    "fastapi",
    "uvicorn",
    "pydantic-settings>=2.0",
]

setuptools.setup(
    name="sitedesk",
    url=vars2readme["__url__"],
    version=vars2readme["__version__"],
    author=vars2readme["__author__"],
    description="Content editing and backup/restore core for a site admin panel",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["sitedesk", "sitedesk.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=core_deps,
    extras_require={
        "api": api_deps,
        "test": api_deps + [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "sitedesk=sitedesk.cli:main",
        ],
    },
)
