#! /usr/bin/env python
#
# License: 3-clause BSD

descr = """Distributed Mandelbrot set renderer over MPI"""

import os
import shutil

from setuptools import Command, find_packages, setup


#==============================================================================
DISTNAME = 'mandelbrot_mpi'
DESCRIPTION = 'Interactive Mandelbrot set renderer distributed over MPI'
with open('README.rst') as f:
    LONG_DESCRIPTION = f.read()
LICENSE = 'BSD'
VERSION = '1.0.0'
#===============================================================================


install_requires = ['numpy',
                    'mpi4py >= 3.1',
                    'matplotlib']

extras_require = {'test': ['pytest']}


###############################################################################

class CleanCommand(Command):
    description = "Remove build artifacts from the source tree"
    user_options = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        for name in ['build', 'dist', DISTNAME + '.egg-info']:
            if os.path.exists(name):
                shutil.rmtree(name)
        for dirpath, dirnames, filenames in os.walk(DISTNAME):
            for filename in filenames:
                if filename.endswith('.pyc'):
                    os.unlink(os.path.join(dirpath, filename))
            for dirname in dirnames:
                if dirname == '__pycache__':
                    shutil.rmtree(os.path.join(dirpath, dirname))


###############################################################################

def setup_package():

    metadata = dict(name=DISTNAME,
                    description=DESCRIPTION,
                    license=LICENSE,
                    version=VERSION,
                    long_description=LONG_DESCRIPTION,
                    long_description_content_type='text/x-rst',
                    packages=find_packages(include=[DISTNAME, DISTNAME + '.*']),
                    python_requires='>=3.8',
                    install_requires=install_requires,
                    extras_require=extras_require,
                    entry_points={'console_scripts': [
                        'mandelbrot_mpi=mandelbrot_mpi.run_mandelbrot:main']},
                    classifiers=['Intended Audience :: Science/Research',
                                 'Intended Audience :: Developers',
                                 'License :: OSI Approved',
                                 'Programming Language :: Python',
                                 'Programming Language :: Python :: 3',
                                 'Topic :: Scientific/Engineering',
                                 'Topic :: Scientific/Engineering :: Visualization',
                                 'Operating System :: POSIX',
                                 'Operating System :: Unix',
                                 'Operating System :: MacOS',
                                 ],
                    cmdclass={'clean': CleanCommand},
                    zip_safe=False)

    setup(**metadata)


if __name__ == "__main__":
    setup_package()
