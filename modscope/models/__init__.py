"""Value types shared by the analyzers, link classifiers and report assembler."""
