from setuptools import setup, find_packages

setup(
    name="critical-css",
    version="1.0.0",
    packages=find_packages(),
    install_requires=[
        'beautifulsoup4',
        'soupsieve',
        'tinycss2',
        'requests',
        'urllib3',
        'aiofiles',
        'chardet',
        'validators',
        'colorama',
        'tqdm',
        'orjson',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-cov',
            'pytest-timeout',
            'pytest-xdist',
        ],
    },
    entry_points={
        'console_scripts': [
            'critical-css=critical_css.cli:main',
        ],
    },
    python_requires='>=3.9',
    author="Kenneth Hanks",
    author_email="fourfigs@gmail.com",
    description="Inline the CSS an HTML document needs for its first paint and defer the rest",
    long_description=open('README.md').read(),
    long_description_content_type="text/markdown",
    url="https://github.com/fourfigs/critical-css",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
