from setuptools import setup, find_packages

from keepervault import __version__

install_requires = [
    'colorama',
    'lxml',
    'prompt_toolkit',
    'pycryptodomex',
    'pykeepass>=4.0.7',
    'tabulate',
]

if __name__ == '__main__':
    setup(
        name='keepervault',
        version=__version__,
        description='Keeper Vault Commander: local KDBX password vault manager and importer',
        license='MIT',
        python_requires='>=3.7',
        packages=find_packages(include=['keepervault', 'keepervault.*']),
        install_requires=install_requires,
        extras_require={
            'test': ['pytest'],
        },
        entry_points={
            'console_scripts': [
                'keepervault=keepervault.__main__:main',
            ],
        },
    )
