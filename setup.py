from setuptools import setup, find_packages

setup(
    name='insights-client',
    version='0.1.0',
    packages=find_packages(exclude=['insights_client.tests', 'insights_client.tests.*']),
    include_package_data=True,
    install_requires=[
        'typer',
        'fastapi',
        'uvicorn',
        'kubernetes',
        'pydantic>=2',
        'python-dotenv',
        'pyyaml',
        'requests'
    ],
    extras_require={
        'test': [
            'pytest',
            'httpx',
        ],
    },
    entry_points={
        'console_scripts': [
            'insights-client=insights_client.cli:app'
        ]
    },
    description='Tracks hub-managed clusters and polls their insights reports',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
