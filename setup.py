from setuptools import setup, find_packages
setup(
    name="charles_sturt_scraper",
    version="0.0.1",
    package_dir={"": "src"},
    packages=find_packages("src"),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "beautifulsoup4",
        "pydantic>=2",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'charles-sturt-scraper=charles_sturt_scraper.__main__:_safe_main'
        ]
    }
)
