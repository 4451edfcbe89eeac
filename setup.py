import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    author="0L Network",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    entry_points={"console_scripts": ["txs=libra_txs.cli:entry"]},
    include_package_data=True,
    install_requires=["httpx", "pynacl", "mnemonic", "typing_extensions"],
    long_description=long_description,
    long_description_content_type="text/markdown",
    name="libra-txs",
    packages=["libra_txs"],
    python_requires=">=3.11",
    version="0.1.0",
)
