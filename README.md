# ossporter

A command-line tool for carving a project out of an internal Git repository
(often a monorepo) into a standalone public repository, and for keeping that
public copy in step with the internal one as work continues.

## What it does

- **extract** copies a project subdirectory into an empty (or new) output
  directory and gives it a fresh Git history ("clean slate"). It can instead
  keep the subdirectory's history ("preserve"): the internal repository is
  cloned into a temporary directory, filtered with `git-filter-repo`, and moved
  into the output directory. Either way the internal state file is left out, a
  `.gitignore` is created if missing, and a placeholder `LICENSE-<ID>` file is
  written when the project names a licence and no licence file exists.
- **check** runs simple checks on the extracted copy: a basic secret scan, a
  search for `Cargo.toml` path dependencies that point outside the project,
  and a test for a file whose name starts with `LICENSE` or `COPYING`.
- **push** pushes the configured public branch to the configured public remote,
  adding `origin` when it is missing and refusing to push when `origin` points
  to a different URL.
- **update** goes through the internal commits made since the last sync, one at
  a time. Each one is shown as a diff and can be applied to the public copy with
  `git am`. The last synced commit is recorded in `.oss_porter_state.toml` inside
  the internal project directory, and you are offered to commit that change to
  the internal repository.

Git must be on your `PATH`. Preserve mode also needs `git-filter-repo`.

## Installation

```
pip install .
```

## Configuration

The configuration file is `~/.oss-porter.toml` by default. Pass `--config FILE`
(or `-c FILE`) to use another one. To create a commented starter file in your
home directory:

```
oss-porter config init
```

A project entry looks like this:

```toml
[settings]
default_license = "MIT"

[projects.my_cool_library]
internal_repo_path = "/work/monorepo"
project_subdir = "libs/my_cool_library"
output_path = "/work/public/my_cool_library"
public_repo_url = "git@example.com:your-username/my_cool_library.git"
history_mode = "clean_slate"   # or "preserve"
license = "MIT"
internal_branch = "main"
public_branch = "main"
```

`internal_repo_path`, `project_subdir` and `output_path` are required;
`history_mode` defaults to `clean_slate` and both branches default to `main`.

Projects can also be managed without editing the file by hand:

```
oss-porter config add              # interactive
oss-porter config list
oss-porter config show my_cool_library
oss-porter config validate
oss-porter config remove my_cool_library
```

## Typical workflow

```
oss-porter extract my_cool_library
oss-porter extract my_cool_library --mode preserve
oss-porter check my_cool_library
oss-porter push my_cool_library            # asks before pushing
oss-porter push my_cool_library --force    # pushes without asking
oss-porter update my_cool_library
```

`--mode` takes `clean-slate` or `preserve` and overrides the project's
configured `history_mode`.

Before the first `update`, put the hash of the internal commit that matches the
extracted state into `.oss_porter_state.toml` in the internal project directory:

```toml
last_synced_internal_commit = "<commit hash>"
```

For each new commit, `update` offers these choices: apply it, skip it, leave it
for later in the session, apply all remaining commits, or quit. When a patch
conflicts, resolve it in the output directory and run `git am --continue`, then
run `update` again.

The command exits with status 1 when an operation fails. Log output goes to
standard error; set `OSS_PORTER_LOG` to a level name such as `INFO` or `DEBUG`
to see more of it (the default is `ERROR`).

## Using it as a library

The same operations can be called from Python:

```python
from pathlib import Path

from ossporter.config import load_config
from ossporter.check import check_project

config = load_config(Path("oss-porter.toml"))
result = check_project("my_cool_library", config.projects["my_cool_library"])
print(result.license_ok, result.secrets_found, result.internal_deps_found)
```

Other entry points include `ossporter.extract.extract_clean_slate`,
`ossporter.extract.extract_preserve_history`, `ossporter.remote.push_to_remote`
and, in `ossporter.update`, `get_internal_commits_since` and
`apply_commit_to_output`. Errors are raised as subclasses of
`ossporter.errors.PorterError`.

## Limitations

- The secret scan is a pair of simple regular expressions run over the final
  files; it does not look at Git history, and it skips `target` and `.git`
  directories.
- The licence file written on extract holds placeholder text only, not the
  licence itself.
- The dependency check reads only the `dependencies`, `dev-dependencies` and
  `build-dependencies` tables of a top-level `Cargo.toml`; other manifests are
  not examined.
- The `default_license` and `secrets_scan_level` settings are read and saved
  but not otherwise used.