"""Deploy orchestrator — drives one deploy through the pipeline states.

Forward path::

    PRECHECK -> VERSION_COMPUTE -> CONFIRM -> VERSION_COMMIT
        -> DEPENDENCY_INSTALL -> BUILD [-> POST_BUILD_CONFIRM] -> PUBLISH -> DONE

dev skips POST_BUILD_CONFIRM.  Declining the post-build gate enters
ROLLBACK_VERSION, which restores the previous version and aborts.  Any error
in any state enters CHECKOUT_MAIN (return the repo to ``main``) and then FAIL;
the error is re-raised with the session attached.

Every effect goes through an injected bridge; the orchestrator itself only
reads and writes the repo's state files through the ``Workspace``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from simdeploy.bridge.build import BuildService, check_build_output
from simdeploy.bridge.build_server import ProductionServerClient
from simdeploy.bridge.confirm import Confirmer
from simdeploy.bridge.dev_server import DevServerClient
from simdeploy.bridge.git import GitRepository
from simdeploy.bridge.network import NetworkCheck
from simdeploy.config import DeployConfig
from simdeploy.core.deploy_machine import DeployMachine
from simdeploy.core.release_branch import ReleaseBranchManager
from simdeploy.core.repo_actions import set_repo_version, update_dependencies_json
from simdeploy.core.version_policy import MAIN_BRANCH, check_previous, dev_test_type, next_version
from simdeploy.core.workspace import Workspace
from simdeploy.errors import (
    AbortedDeploymentError,
    DeployError,
    PreconditionError,
    ValidationError,
)
from simdeploy.models.release import BuildOptions, BuildServerRequest
from simdeploy.models.session import DeploySession
from simdeploy.models.stages import POST_BUILD_CONFIRM_STAGES, DeployStage, DeployState
from simdeploy.models.versioning import SimVersion

logger = logging.getLogger(__name__)

StepHandler = Callable[[DeploySession], DeployState]

HTACCESS_INDEX_ORDER = "IndexOrderDefault Descending Date\n"


class DeployOrchestrator:
    """Runs dev, rc and production deploys.

    Parameters
    ----------
    workspace:
        Access to the repo's ``package.json``, ``dependencies.json``, assets
        and build output.
    git / build / dev_server / build_server / network:
        Bridges to the outside world.
    confirmer:
        Answers every yes/no gate.
    config:
        Deployment configuration.  Uses defaults if not provided.
    release_manager:
        Used by rc deploys to create a missing release branch.  Built from
        the other collaborators if not provided.
    """

    def __init__(
        self,
        workspace: Workspace,
        git: GitRepository,
        build: BuildService,
        dev_server: DevServerClient,
        build_server: ProductionServerClient,
        confirmer: Confirmer,
        network: NetworkCheck,
        *,
        config: DeployConfig | None = None,
        release_manager: ReleaseBranchManager | None = None,
    ) -> None:
        self._workspace = workspace
        self._git = git
        self._build = build
        self._dev_server = dev_server
        self._build_server = build_server
        self._confirm = confirmer
        self._network = network
        self.config = config or DeployConfig()
        self._release_manager = release_manager or ReleaseBranchManager(
            workspace, git, build, toolchain_repos=self.config.toolchain_repos
        )

        self._handlers: dict[DeployState, StepHandler] = {
            DeployState.PRECHECK: self._precheck,
            DeployState.VERSION_COMPUTE: self._version_compute,
            DeployState.CONFIRM: self._confirm_deploy,
            DeployState.VERSION_COMMIT: self._version_commit,
            DeployState.DEPENDENCY_INSTALL: self._dependency_install,
            DeployState.BUILD: self._build_step,
            DeployState.POST_BUILD_CONFIRM: self._post_build_confirm,
            DeployState.PUBLISH: self._publish,
            DeployState.ROLLBACK_VERSION: self._rollback_version,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def deploy_dev(
        self,
        repo: str,
        brands: list[str],
        *,
        branch: str = MAIN_BRANCH,
        noninteractive: bool = False,
        message: str | None = None,
    ) -> DeploySession:
        """Deploy a dev (or one-off, when *branch* is not ``main``) version to the dev server."""
        session = DeploySession(
            repo=repo,
            stage=DeployStage.DEV,
            branch=branch,
            brands=brands,
            noninteractive=noninteractive,
            message=message,
        )
        return self.run(session)

    def deploy_rc(
        self,
        repo: str,
        branch: str,
        brands: list[str],
        *,
        noninteractive: bool = False,
        message: str | None = None,
    ) -> DeploySession:
        """Deploy a release candidate from release branch *branch* via the build server."""
        session = DeploySession(
            repo=repo,
            stage=DeployStage.RC,
            branch=branch,
            brands=brands,
            noninteractive=noninteractive,
            message=message,
        )
        return self.run(session)

    def deploy_production(
        self,
        repo: str,
        branch: str,
        brands: list[str],
        *,
        noninteractive: bool = False,
        redeploy: bool = False,
        message: str | None = None,
    ) -> DeploySession:
        """Deploy release branch *branch* to production via the build server."""
        session = DeploySession(
            repo=repo,
            stage=DeployStage.PRODUCTION,
            branch=branch,
            brands=brands,
            noninteractive=noninteractive,
            redeploy=redeploy,
            message=message,
        )
        return self.run(session)

    def run(self, session: DeploySession) -> DeploySession:
        """Advance *session* from its current state until DONE or FAIL.

        Returns the session on success.  On failure, returns the repo to
        ``main`` and re-raises the original error.
        """
        machine = DeployMachine(session)
        logger.info(
            "%s: %s deploy of %s on %s (brands: %s)",
            session.session_id,
            session.stage.value,
            session.repo,
            session.branch,
            ",".join(session.brands),
        )
        try:
            while not machine.is_terminal:
                next_state = self._handlers[machine.state](session)
                machine.transition(next_state)
        except Exception as exc:
            self._fail(machine, exc)
            raise
        logger.info("%s: deployed %s %s", session.session_id, session.repo, session.version_string)
        return session

    def _fail(self, machine: DeployMachine, exc: Exception) -> None:
        session = machine.session
        session.error = str(exc)
        logger.warning(
            "Detected failure during %s deploy of %s in state %s, reverting to %s: %s",
            session.stage.value,
            session.repo,
            session.state.value,
            MAIN_BRANCH,
            exc,
        )
        machine.transition(DeployState.CHECKOUT_MAIN, note=type(exc).__name__)
        try:
            self._git.checkout(session.repo, MAIN_BRANCH)
        except DeployError:
            logger.exception("Could not check out %s in %s", MAIN_BRANCH, session.repo)
        machine.transition(DeployState.FAIL, note=str(exc))
        if isinstance(exc, DeployError):
            exc.session = session

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _precheck(self, session: DeploySession) -> DeployState:
        repo, stage, branch = session.repo, session.stage, session.branch

        if stage == DeployStage.DEV:
            if session.is_one_off and "-" in branch:
                raise ValidationError(
                    "One-off versions should be from branches that do not include hyphens",
                    field="branch",
                )
        else:
            SimVersion.ensure_release_branch(branch)
        if not session.brands:
            raise ValidationError("At least one brand is required", field="brands")
        if session.redeploy and not session.noninteractive:
            raise PreconditionError("redeploy can only be specified with noninteractive")

        if not self._network.is_reachable():
            raise PreconditionError(
                "VPN or being on campus is required for this build. Ensure VPN is enabled, "
                f"or that you have access to {self.config.vpn_check_host}"
            )

        to_check = self._workspace.dependency_repos(repo) if stage == DeployStage.DEV else [repo]
        for name in to_check:
            if not self._git.is_clean(name):
                raise PreconditionError(f"Unclean status in {name}, cannot deploy")

        if stage == DeployStage.RC:
            self._ensure_rc_branch(session)
        elif stage == DeployStage.PRODUCTION and not self._git.has_remote_branch(repo, branch):
            raise PreconditionError(f"Cannot find release branch {branch} for {repo}")
        if stage != DeployStage.DEV:
            self._git.checkout(repo, branch)

        current = self._git.current_branch(repo)
        if current != branch:
            raise PreconditionError(
                f"{self._label(session)} deployment should be on the branch {branch}, "
                f"not: {current or '(detached head)'}"
            )
        if stage == DeployStage.DEV:
            current_sha = self._git.head_sha(repo)
            latest_sha = self._git.remote_branch_sha(repo, branch)
            if current_sha != latest_sha:
                raise PreconditionError(
                    "Out of date with remote, please push or pull repo. "
                    f"Current SHA: {current_sha}, latest SHA: {latest_sha}"
                )

        previous = self._workspace.get_version(repo)
        check_previous(
            stage,
            previous,
            branch=branch,
            redeploy=session.redeploy,
            noninteractive=session.noninteractive,
        )
        session.previous_version = previous
        session.published = self._workspace.is_published(repo)

        supported = self._workspace.supported_brands(repo)
        unsupported = [brand for brand in session.brands if brand not in supported]
        if unsupported:
            raise ValidationError(
                f"Brands {','.join(unsupported)} not included in {repo}'s supported brands: "
                f"{','.join(supported)}",
                field="brands",
            )
        if (
            stage == DeployStage.PRODUCTION
            and "phet" in session.brands
            and not self._workspace.has_screenshot(repo)
        ):
            raise PreconditionError(
                f"Missing screenshot file ({repo}/assets/{repo}-screenshot.png), "
                "aborting production deployment"
            )
        if (
            stage == DeployStage.RC
            and "phet-io" in session.brands
            and self._workspace.phetio_validation_disabled(repo)
        ):
            raise PreconditionError("PhET-iO simulations require validation for RCs")

        if stage == DeployStage.DEV:
            self._build.lint(repo)
        return DeployState.VERSION_COMPUTE

    def _ensure_rc_branch(self, session: DeploySession) -> None:
        repo, branch = session.repo, session.branch
        if self._git.has_remote_branch(repo, branch):
            return
        if session.noninteractive or not self._confirm(
            f"Release branch {branch} does not exist. Create it?", False
        ):
            raise PreconditionError("Aborted rc deployment due to non-existing branch")
        self._release_manager.create_release(repo, branch, session.brands, session.message)

    def _version_compute(self, session: DeploySession) -> DeployState:
        proposal = next_version(
            session.stage,
            session.previous_version,
            branch=session.branch,
            redeploy=session.redeploy,
            noninteractive=session.noninteractive,
        )
        session.proposed_version = proposal.proposed
        session.version_changed = proposal.changed
        logger.info(
            "%s version: %s -> %s", session.repo, proposal.previous, proposal.proposed
        )

        if session.stage in (DeployStage.DEV, DeployStage.RC):
            self._require_new_dev_directory(session)
        return DeployState.CONFIRM

    def _confirm_deploy(self, session: DeploySession) -> DeployState:
        version = session.version_string
        if session.stage != DeployStage.PRODUCTION:
            self._gate(
                session,
                f"Deploy {version} to {self._dev_server.host}",
                f"Aborted {self._label(session)} deployment",
            )
            return DeployState.VERSION_COMMIT

        aborted = "Aborted production deployment"
        self._gate(session, "Are QA credits up-to-date?", aborted)
        self._gate(
            session,
            "Have all maintenance patches that need spot checks been tested? "
            "(An issue would be created in the sim repo)",
            aborted,
        )
        if not session.published:
            self._gate(
                session,
                "Is the main checklist complete (e.g. are screenshots added to assets, etc.)",
                aborted,
            )
        self._gate(
            session,
            f"DEPLOY {session.repo} {version} (brands: {','.join(session.brands)}) to PRODUCTION",
            aborted,
        )
        return DeployState.VERSION_COMMIT

    def _version_commit(self, session: DeploySession) -> DeployState:
        if session.version_changed:
            set_repo_version(
                self._workspace,
                self._git,
                session.repo,
                session.proposed_version,
                session.message,
            )
            self._git.push(session.repo, session.branch)
        else:
            logger.info("Redeploying %s %s without a version change", session.repo, session.version_string)
        return DeployState.DEPENDENCY_INSTALL

    def _dependency_install(self, session: DeploySession) -> DeployState:
        for name in [session.repo, *self.config.toolchain_repos]:
            self._build.npm_update(name)
        return DeployState.BUILD

    def _build_step(self, session: DeploySession) -> DeployState:
        is_dev = session.stage == DeployStage.DEV
        options = BuildOptions(
            brands=session.brands,
            minify=not session.noninteractive,
            all_html=is_dev,
            debug_html=is_dev,
        )
        output = self._build.build(session.repo, options)
        logger.debug("Build output for %s:\n%s", session.repo, output)
        check_build_output(output)
        if session.stage in POST_BUILD_CONFIRM_STAGES:
            return DeployState.POST_BUILD_CONFIRM
        return DeployState.PUBLISH

    def _post_build_confirm(self, session: DeploySession) -> DeployState:
        if self._confirm(
            f"Please test the built version of {session.repo}.\nIs it ready to deploy?",
            session.noninteractive,
        ):
            return DeployState.PUBLISH
        return DeployState.ROLLBACK_VERSION

    def _rollback_version(self, session: DeploySession) -> DeployState:
        if session.version_changed:
            previous = session.previous_version
            logger.warning("Reverting %s on %s to %s", session.repo, session.branch, previous)
            try:
                set_repo_version(self._workspace, self._git, session.repo, previous, session.message)
                self._git.push(session.repo, session.branch)
            except DeployError:
                logger.critical(
                    "Could not revert %s on %s to %s; the branch still carries %s",
                    session.repo,
                    session.branch,
                    previous,
                    session.version_string,
                )
                raise
        raise AbortedDeploymentError(
            f"Aborted {self._label(session)} deployment (aborted version change too)."
        )

    def _publish(self, session: DeploySession) -> DeployState:
        if session.stage == DeployStage.DEV:
            self._publish_to_dev_server(session)
        else:
            self._publish_to_build_server(session)
        for url in session.deployed_urls:
            logger.info("Deployed: %s", url)
        return DeployState.DONE

    def _publish_to_dev_server(self, session: DeploySession) -> None:
        repo, version = session.repo, session.version_string
        sim_path = self._dev_sim_path(repo)
        version_path = self._dev_version_path(repo, version)

        if not self._dev_server.directory_exists(sim_path):
            self._dev_server.ssh(
                f'mkdir -p "{sim_path}" && echo "{HTACCESS_INDEX_ORDER}" > "{sim_path}/.htaccess"'
            )
        self._require_new_dev_directory(session)
        self._dev_server.ssh(f'mkdir -p "{version_path}"')
        for brand in session.brands:
            self._dev_server.scp(self._workspace.build_dir(repo, brand), f"{version_path}/")

        update_dependencies_json(
            self._workspace, self._git, repo, session.brands, version, session.branch
        )
        session.deployed_urls = self._dev_urls(repo, version, session.brands)

    def _publish_to_build_server(self, session: DeploySession) -> None:
        repo, version = session.repo, session.version_string
        update_dependencies_json(
            self._workspace, self._git, repo, session.brands, version, session.branch
        )

        if session.stage == DeployStage.RC:
            locales: list[str] | str = ["*"]
            servers = ["dev"]
        else:
            locales = "*"
            servers = ["dev", "production"]
        request = BuildServerRequest(
            dependencies=json.dumps(self._workspace.dependencies(repo)),
            sim_name=repo,
            version=version,
            locales=locales,
            servers=servers,
            brands=session.brands,
            branch=session.branch,
            authorization_code=self.config.build_server_authorization_code,
            email=self.config.build_server_email,
        )
        self._build_server.request_build(request)

        self._git.checkout(repo, MAIN_BRANCH)
        if session.stage == DeployStage.RC:
            session.deployed_urls = self._dev_urls(repo, version, session.brands)
        else:
            session.deployed_urls = self._production_urls(repo, version, session.brands)
        logger.info("Please wait for the build-server to complete the deployment, and then test!")
        logger.info(
            "To view the current build status, visit %s/deploy-status",
            self.config.production_server_url.rstrip("/"),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _gate(self, session: DeploySession, prompt: str, abort_message: str) -> None:
        if not self._confirm(prompt, session.noninteractive):
            raise AbortedDeploymentError(abort_message)

    def _label(self, session: DeploySession) -> str:
        if session.stage == DeployStage.DEV:
            return dev_test_type(session.branch)
        return session.stage.value

    def _dev_sim_path(self, repo: str) -> str:
        return f"{self.config.dev_deploy_path.rstrip('/')}/{repo}"

    def _dev_version_path(self, repo: str, version: str) -> str:
        return f"{self._dev_sim_path(repo)}/{version}"

    def _require_new_dev_directory(self, session: DeploySession) -> None:
        version_path = self._dev_version_path(session.repo, session.version_string)
        if self._dev_server.directory_exists(version_path):
            raise PreconditionError(
                f"Directory {version_path} already exists.  If you intend to replace the "
                f"content then remove the directory manually from {self._dev_server.host}."
            )

    def _dev_urls(self, repo: str, version: str, brands: list[str]) -> list[str]:
        base = f"{self.config.dev_site_url.rstrip('/')}/{repo}/{version}"
        urls = []
        if "phet" in brands:
            urls.append(f"{base}/phet/{repo}_all_phet.html")
        if "phet-io" in brands:
            urls.append(f"{base}/phet-io/")
        return urls

    def _production_urls(self, repo: str, version: str, brands: list[str]) -> list[str]:
        urls = []
        if "phet" in brands:
            urls.append(f"{self.config.production_site_url.rstrip('/')}/{repo}/latest/{repo}_all.html")
        if "phet-io" in brands:
            urls.append(f"{self.config.phetio_site_url.rstrip('/')}/{repo}/{version}/")
        return urls
