from setuptools import setup, find_packages

setup(
    name='knapsack',
    version='0.1.0',
    py_modules=['knapsack', 'bundler'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    install_requires=[
        'pydantic>=2.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'knapsack = knapsack:main',
        ],
    },
)
