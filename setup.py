from setuptools import setup
from os import path

here = path.abspath(path.dirname(__file__))

about = {}
with open(path.join(here, "sui_ptb", "version.py")) as f:
    exec(f.read(), about)

setup(
    name='sui-ptb',
    version=about["__version__"],
    description='Sui Programmable Transaction Builder',
    long_description="Build Sui programmable transactions from partial arguments, "
                     "resolve them against a full node and serialize them to BCS bytes",
    url='https://github.com/OmniBTC/DolaProtocol/blob/main/utils',
    # Author details
    author='DaiWei',
    author_email='dw1253464613@gmail.com',
    # Choose your license
    license='MIT',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
    python_requires=">=3.8",
    packages=["sui_ptb"],
    install_requires=["pyyaml", "httpx", "python-dotenv", "base58"],
    extras_require={
        "test": ["pytest"],
    },
)
