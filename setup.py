from setuptools import setup, find_namespace_packages

version = '0.0'

classifiers = """
Development Status :: 3 - Alpha
License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)
Operating System :: OS Independent
Programming Language :: Python :: 3
Programming Language :: Python :: 3.8
Programming Language :: Python :: 3.12
""".strip().splitlines()

long_description = (
    open('README.rst').read()
    + '\n' +
    open('CHANGES.rst').read()
    + '\n')

setup(
    name='concourse.routing',
    version=version,
    description="Route matching, dispatch and url building for Concourse "
                "applications.",
    long_description=long_description,
    classifiers=classifiers,
    keywords='',
    author='',
    author_email='',
    url='',
    license='gpl',
    packages=find_namespace_packages('src', include=['concourse.*']),
    package_dir={'': 'src'},
    include_package_data=True,
    zip_safe=False,
    install_requires=[
        # -*- Extra requirements: -*-
        'regex',
        'toml',
        'uritemplate',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    python_requires='>=3.8',
    entry_points={
    },
)
