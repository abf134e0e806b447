import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name='sklearn_smo',
    version='0.1',
    packages=setuptools.find_packages(),
    license='BSD',
    description='Kernel Support Vector Machine trained with simplified '
                '*Sequential Minimal Optimization* (SMO) for scikit-learn.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires='>=3.8',
    install_requires=[
        'scikit_learn >= 1.0',
        'numpy',
        'scipy',
        'matplotlib',
    ],
    extras_require={
        'tests': ['pytest >= 3.5'],
    },
)
