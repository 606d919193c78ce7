"""Shared test fixtures — sample diffs, Rust sources, temp git repos."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path

import pytest

LIB_RS_OLD = textwrap.dedent("""\
    use std::fmt;

    /// A configuration value.
    pub struct Config {
        pub name: String,
    }

    impl Config {
        pub fn new(name: &str) -> Self {
            Config { name: name.to_string() }
        }
    }

    impl fmt::Display for Config {
        fn fmt(&self, f: &mut fmt::Formatter<'_>) -> fmt::Result {
            write!(f, "{}", self.name)
        }
    }

    #[cfg(test)]
    mod tests {
        use super::*;

        fn helper() -> Config {
            Config::new("x")
        }

        #[test]
        fn it_works() {
            assert!(helper().name.len() == 1);
        }
    }
""")

LIB_RS = textwrap.dedent("""\
    use std::fmt;

    /// A configuration value.
    pub struct Config {
        pub name: String,
    }

    impl Config {
        pub fn new(name: &str) -> Self {
            Config { name: name.to_string() }
        }

        pub(crate) fn shout(&self) -> String {
            self.name.to_uppercase()
        }
    }

    impl fmt::Display for Config {
        fn fmt(&self, f: &mut fmt::Formatter<'_>) -> fmt::Result {
            write!(f, "{}", self.name)
        }
    }

    #[cfg(test)]
    mod tests {
        use super::*;

        fn helper() -> Config {
            Config::new("x")
        }

        #[test]
        fn it_works() {
            assert_eq!(helper().name, "x");
        }
    }
""")


@pytest.fixture
def lib_rs() -> str:
    """Post-change src/lib.rs."""
    return LIB_RS


@pytest.fixture
def lib_rs_old() -> str:
    """Pre-change src/lib.rs."""
    return LIB_RS_OLD


@pytest.fixture
def sample_diff_lib() -> str:
    """Adds ``Config::shout`` and edits the ``it_works`` test."""
    return textwrap.dedent("""\
        diff --git a/src/lib.rs b/src/lib.rs
        index 1a2b3c4..5d6e7f8 100644
        --- a/src/lib.rs
        +++ b/src/lib.rs
        @@ -9,4 +9,8 @@ impl Config {
             pub fn new(name: &str) -> Self {
                 Config { name: name.to_string() }
             }
        +
        +    pub(crate) fn shout(&self) -> String {
        +        self.name.to_uppercase()
        +    }
         }
        @@ -29,3 +33,3 @@ mod tests {
             fn it_works() {
        -        assert!(helper().name.len() == 1);
        +        assert_eq!(helper().name, "x");
             }
    """)


@pytest.fixture
def sample_diff_new_file() -> str:
    """A new Rust file with one public function."""
    return textwrap.dedent("""\
        diff --git a/src/util.rs b/src/util.rs
        new file mode 100644
        index 0000000..e69de29
        --- /dev/null
        +++ b/src/util.rs
        @@ -0,0 +1,3 @@
        +pub fn double(x: i32) -> i32 {
        +    x * 2
        +}
    """)


@pytest.fixture
def util_rs() -> str:
    return "pub fn double(x: i32) -> i32 {\n    x * 2\n}\n"


@pytest.fixture
def sample_diff_binary() -> str:
    """A diff with a binary file."""
    return textwrap.dedent("""\
        diff --git a/assets/logo.png b/assets/logo.png
        new file mode 100644
        Binary files /dev/null and b/assets/logo.png differ
    """)


@pytest.fixture
def sample_diff_rename() -> str:
    """A renamed Rust file with one added line."""
    return textwrap.dedent("""\
        diff --git a/src/old_name.rs b/src/new_name.rs
        similarity index 97%
        rename from src/old_name.rs
        rename to src/new_name.rs
        index abc1234..def5678 100644
        --- a/src/old_name.rs
        +++ b/src/new_name.rs
        @@ -1,3 +1,4 @@
         fn run() {
        +    setup();
             work();
         }
    """)


@pytest.fixture
def sample_diff_pure_rename() -> str:
    """A rename without content changes."""
    return textwrap.dedent("""\
        diff --git a/src/a.rs b/src/b.rs
        similarity index 100%
        rename from src/a.rs
        rename to src/b.rs
    """)


@pytest.fixture
def sample_diff_mode_only() -> str:
    """A diff with only file mode change."""
    return textwrap.dedent("""\
        diff --git a/scripts/build.sh b/scripts/build.sh
        old mode 100644
        new mode 100755
    """)


@pytest.fixture
def sample_diff_no_newline() -> str:
    """A diff with 'No newline at end of file' markers on both sides."""
    return textwrap.dedent("""\
        diff --git a/src/main.rs b/src/main.rs
        index abc1234..def5678 100644
        --- a/src/main.rs
        +++ b/src/main.rs
        @@ -1,3 +1,3 @@
         fn main() {
             run();
        -}
        \\ No newline at end of file
        +}
        \\ No newline at end of file
    """)


@pytest.fixture
def sample_diff_deleted() -> str:
    """A deleted Rust file."""
    return textwrap.dedent("""\
        diff --git a/src/gone.rs b/src/gone.rs
        deleted file mode 100644
        index abc1234..0000000
        --- a/src/gone.rs
        +++ /dev/null
        @@ -1,3 +0,0 @@
        -pub fn gone() {
        -    unimplemented!()
        -}
    """)


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    # Initial commit
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "lib.rs").write_text(LIB_RS_OLD)
    subprocess.run(["git", "add", "."], cwd=tmp_path, capture_output=True, check=True)
    subprocess.run(
        ["git", "commit", "-m", "init"],
        cwd=tmp_path, capture_output=True, check=True,
    )
    return tmp_path
