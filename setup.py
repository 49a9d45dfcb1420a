from setuptools import setup, find_packages


install_requires = [
    "numpy",
    "ms_peak_picker",
    "brain-isotopic-distribution >= 1.5.8",
]


extra_requires = {
    "cli": [
        'click'
    ],
    "test": [
        'pytest',
        'click',
    ],
}


extra_requires['all'] = sorted({dep for feature_reqs in extra_requires.values() for dep in feature_reqs})


def run_setup():
    with open("ms_deconvolution/version.py") as version_file:
        version = None
        for line in version_file.readlines():
            if "version = " in line:
                version = line.split(" = ")[1].replace("\"", "").strip()
                break
        else:
            print("Cannot determine version")

    try:
        with open("README.rst") as readme_file:
            long_description = readme_file.read()
    except Exception as e:
        print(e)
        long_description = ''

    setup(
        name='ms_deconvolution',
        version=version,
        packages=find_packages(include=["ms_deconvolution", "ms_deconvolution.*"]),
        description='Charge State Deconvolution of Mass Spectra with Interchangeable Algorithms',
        long_description=long_description,
        entry_points={
            'console_scripts': [
                "ms-deconvolute = ms_deconvolution.tools.cli:main",
            ],
        },
        classifiers=[
            'Development Status :: 3 - Alpha',
            'Intended Audience :: Science/Research',
            'Topic :: Scientific/Engineering :: Bio-Informatics'],
        python_requires=">=3.7",
        install_requires=install_requires,
        extras_require=extra_requires,
        include_package_data=True,
        zip_safe=False)


run_setup()
