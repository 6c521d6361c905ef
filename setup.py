import setuptools
import os

own_dir = os.path.abspath(os.path.dirname(__file__))


def requirements():
    with open(os.path.join(own_dir, 'requirements.txt')) as f:
        for line in f.readlines():
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            yield line


def modules():
    return [
        'ctx',
    ]


def version():
    with open(os.path.join(own_dir, 'VERSION')) as f:
        return f.read().strip()


setuptools.setup(
    name='sovereign-cloud-api-utils',
    version=version(),
    description='authentication settings and list-response models for sovereign cloud APIs',
    python_requires='>=3.10',
    py_modules=modules(),
    packages=['apiutil', 'cloudcli', 'model'],
    install_requires=list(requirements()),
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'cloud-api = cloudcli.__main__:main',
        ],
    },
)
