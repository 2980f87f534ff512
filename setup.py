from setuptools import setup, find_namespace_packages

# install modules with
#   `pip install .`
# or for developers
#   `pip install .[dev]`
setup(
    name='llm-payload-decoder',
    version='1.0',
    description='Resilient decoder for script payloads in LLM completions',
    author='Marie Hoffmann',
    author_email='aieoa-dev@proton.me',
    packages=find_namespace_packages(include=['src', 'src.*']),
    install_requires=[
        'fastmcp',
        'GitPython',
        'json_repair',
        'PyYAML',
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
        ]
    }
)
