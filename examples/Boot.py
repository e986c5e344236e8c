"""Launch the program under ./Boot/src.

    python Boot.py Ada Grace

compiles ./Boot/src into ./Boot/classes and calls main.main(["Ada", "Grace"]). Rename this
file together with the Boot directory to launch another program.
"""

import srcboot

if __name__ == "__main__":
    srcboot.main()
