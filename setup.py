from setuptools import setup, find_packages

setup(
    name='pathmutex',
    version='0.1.0',
    author='Thomas Hansen',
    author_email='thomas.hansen@queensu.ca',
    description='Inter-process mutual exclusion using a file or directory as the lock.',
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        'click',
        'platformdirs',
        'pydantic>=2',
        'pyyaml',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        "console_scripts": [
            # 'pathmutex' command will call the main() group in pathmutex/cli.py
            "pathmutex = pathmutex.cli:main",
        ],
    },
    classifiers=[
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.10',
)
